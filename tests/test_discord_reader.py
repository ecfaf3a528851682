import pytest

from discord_reader import (
    DISCORD_API,
    DiscordReader,
    channel_from_payload,
    dump_snapshot,
    guild_from_payload,
    load_snapshot,
    member_from_payload,
    override_from_payload,
    role_from_payload,
)
from errors import DiscordAPIError, InvalidArgumentError
from models import PUBLIC_ROLE_POSITION, ChannelType, HolderType
from permissions.bitmask import Permission
from permissions.resolver import resolve_channel_permissions

GUILD_ID = 111
SEND = Permission.SEND_MESSAGES.raw
VIEW = Permission.VIEW_CHANNEL.raw

GUILD = {"id": str(GUILD_ID), "name": "Payload Guild", "owner_id": "900"}
ROLES = [
    {"id": str(GUILD_ID), "name": "@everyone", "permissions": str(VIEW), "position": 0, "color": 0},
    {"id": "222", "name": "Member", "permissions": str(SEND), "position": 1, "color": 0x00FF00},
    {"id": "333", "name": "Bot", "permissions": "0", "position": 2, "managed": True},
]
CHANNELS = [
    {"id": "10", "type": 4, "name": "Text", "position": 0},
    {
        "id": "11",
        "type": 0,
        "name": "general",
        "position": 1,
        "parent_id": "10",
        "permission_overwrites": [
            {"id": "222", "type": 0, "allow": "0", "deny": str(SEND)},
            {"id": "901", "type": 1, "allow": str(SEND), "deny": "0"},
            {"id": "444", "type": 0, "allow": "0", "deny": str(VIEW)},
        ],
    },
    {"id": "12", "type": 11, "name": "a-thread"},
]
MEMBERS = [
    {"user": {"id": "901", "username": "alice"}, "nick": "Al", "roles": ["222"]},
    {"user": {"id": "902", "username": "bob", "global_name": "Bobby"}, "roles": ["222", "555"]},
]


def test_role_from_payload():
    public = role_from_payload(ROLES[0], GUILD_ID)
    assert public.is_public and public.position == PUBLIC_ROLE_POSITION
    assert public.permissions == VIEW
    assert public.color is None

    bot = role_from_payload(ROLES[2], GUILD_ID)
    assert bot.managed and not bot.is_public and bot.position == 2


def test_override_from_payload():
    ov = override_from_payload({"id": "5", "type": "member", "allow": "2048"})
    assert ov.holder_type is HolderType.MEMBER
    assert ov.allowed == 2048 and ov.denied == 0
    with pytest.raises(InvalidArgumentError):
        override_from_payload({"id": "5", "type": 7})


def test_channel_from_payload_skips_unmodelled_types():
    assert channel_from_payload(CHANNELS[2], GUILD_ID) is None
    category = channel_from_payload(CHANNELS[0], GUILD_ID)
    assert category.type is ChannelType.CATEGORY


def test_channel_from_payload_drops_overrides_for_deleted_roles():
    channel = channel_from_payload(CHANNELS[1], GUILD_ID, role_ids={GUILD_ID, 222, 333})
    assert channel.category_id == 10
    assert len(channel.overrides) == 2
    assert channel.override_for(HolderType.ROLE, 444) is None


def test_guild_and_member_from_payload():
    guild = guild_from_payload(GUILD, ROLES, CHANNELS)
    assert guild.owner_id == 900
    assert [c.name for c in guild.channels] == ["Text", "general"]

    alice = member_from_payload(MEMBERS[0], guild)
    assert alice.name == "Al"
    assert [r.id for r in alice.roles] == [222]

    bob = member_from_payload(MEMBERS[1], guild)
    assert bob.name == "Bobby"
    assert [r.id for r in bob.roles] == [222]

    general = guild.get_channel(11)
    assert resolve_channel_permissions(alice, general) & SEND
    assert not resolve_channel_permissions(bob, general) & SEND


def test_snapshot_round_trip(tmp_path):
    path = tmp_path / "snapshot.json"
    dump_snapshot(str(path), {"guild": GUILD, "roles": ROLES, "channels": CHANNELS, "members": MEMBERS})
    guild, members = load_snapshot(str(path))
    assert guild.id == GUILD_ID
    assert set(members) == {901, 902}
    assert members[901].guild is guild


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        return self.routes.get(url, FakeResponse(404, text="Unknown"))


def _routes():
    base = f"{DISCORD_API}/guilds/{GUILD_ID}"
    return {
        base: FakeResponse(200, GUILD),
        f"{base}/roles": FakeResponse(200, ROLES),
        f"{base}/channels": FakeResponse(200, CHANNELS),
        f"{base}/members/901": FakeResponse(200, MEMBERS[0]),
    }


def test_reader_builds_snapshot(capsys):
    session = FakeSession(_routes())
    reader = DiscordReader(bot_token="tok", guild_id=str(GUILD_ID), session=session)
    guild = reader.read()
    member = reader.read_member(guild, 901)

    assert guild.name == "Payload Guild"
    assert member.display_name == "Al"
    assert session.calls[0][1] == {"Authorization": "Bot tok"}
    assert all(timeout == 10 for _, _, timeout in session.calls)
    assert reader.raw["members"] == [MEMBERS[0]]
    assert "Payload Guild" in capsys.readouterr().out


def test_reader_raises_on_http_errors():
    reader = DiscordReader(bot_token="tok", guild_id=str(GUILD_ID), session=FakeSession({}))
    with pytest.raises(DiscordAPIError) as exc:
        reader.read()
    assert exc.value.status_code == 404

    routes = {f"{DISCORD_API}/guilds/{GUILD_ID}": FakeResponse(401)}
    reader = DiscordReader(bot_token="bad", guild_id=str(GUILD_ID), session=FakeSession(routes))
    with pytest.raises(DiscordAPIError) as exc:
        reader.read()
    assert exc.value.status_code == 401
