"""
discord_reader.py
─────────────────
Reads a Discord guild via the REST API (or a saved JSON dump) and converts it
into the immutable Guild / Member snapshots the permission engine consumes.

Requires a Discord bot token with at minimum:
  • View Channels
  • Server Members Intent  ← only for member lookups
"""

from __future__ import annotations
import json
import logging
from typing import Any

import requests

from errors import DiscordAPIError, InvalidArgumentError
from models import Channel, ChannelType, Guild, HolderType, Member, PermissionOverride, Role

logger = logging.getLogger(__name__)

DISCORD_API = "https://discord.com/api/v10"

# Discord channel type constants
_D_TEXT = 0
_D_VOICE = 2
_D_CATEGORY = 4
_D_ANNOUNCE = 5
_D_STAGE = 13
_D_FORUM = 15

# Discord overwrite type constants
_D_OVERWRITE_ROLE = 0
_D_OVERWRITE_MEMBER = 1


def _discord_type_to_channel_type(dtype: int) -> ChannelType | None:
    return {
        _D_TEXT: ChannelType.TEXT,
        _D_VOICE: ChannelType.VOICE,
        _D_CATEGORY: ChannelType.CATEGORY,
        _D_ANNOUNCE: ChannelType.ANNOUNCE,
        _D_FORUM: ChannelType.FORUM,
        _D_STAGE: ChannelType.STAGE,
    }.get(dtype)


# ── payload → snapshot ────────────────────────────────────────────────────────


def role_from_payload(payload: dict, guild_id: int) -> Role:
    role_id = int(payload["id"])
    is_public = role_id == guild_id or payload.get("name") == "@everyone"
    return Role(
        id=role_id,
        guild_id=guild_id,
        name=payload["name"],
        permissions=int(payload.get("permissions", 0)),
        position=payload.get("position", 0),
        managed=payload.get("managed", False),
        is_public=is_public,
        color=payload.get("color") or None,
    )


def override_from_payload(payload: dict) -> PermissionOverride:
    # Old API versions sent "role" / "member" instead of 0 / 1
    kind = payload["type"]
    if kind in (_D_OVERWRITE_ROLE, "role"):
        holder_type = HolderType.ROLE
    elif kind in (_D_OVERWRITE_MEMBER, "member"):
        holder_type = HolderType.MEMBER
    else:
        raise InvalidArgumentError(f"Unknown overwrite type: {kind!r}")
    return PermissionOverride(
        holder_type=holder_type,
        holder_id=int(payload["id"]),
        allowed=int(payload.get("allow", 0) or 0),
        denied=int(payload.get("deny", 0) or 0),
    )


def channel_from_payload(
    payload: dict, guild_id: int, role_ids: set[int] | None = None
) -> Channel | None:
    """
    Returns None for channel kinds the engine does not model (threads, DMs).
    When ``role_ids`` is given, overrides for roles outside it are dropped.
    """
    ctype = _discord_type_to_channel_type(payload["type"])
    if ctype is None:
        return None

    overrides = []
    for raw in payload.get("permission_overwrites") or []:
        ov = override_from_payload(raw)
        if role_ids is not None and ov.is_role_override and ov.holder_id not in role_ids:
            logger.warning(
                "Dropping override on #%s for deleted role %s", payload.get("name"), ov.holder_id
            )
            continue
        overrides.append(ov)

    parent_id = payload.get("parent_id")
    return Channel(
        id=int(payload["id"]),
        guild_id=guild_id,
        name=payload.get("name", ""),
        type=ctype,
        position=payload.get("position", 0),
        category_id=int(parent_id) if parent_id else None,
        overrides=tuple(overrides),
    )


def guild_from_payload(guild: dict, roles: list[dict], channels: list[dict]) -> Guild:
    guild_id = int(guild["id"])
    role_objs = [role_from_payload(r, guild_id) for r in roles]
    role_ids = {r.id for r in role_objs}

    channel_objs = []
    for ch in channels:
        channel = channel_from_payload(ch, guild_id, role_ids)
        if channel is not None:
            channel_objs.append(channel)
    channel_objs.sort(key=lambda c: c.position)

    return Guild(
        id=guild_id,
        name=guild["name"],
        owner_id=int(guild["owner_id"]),
        roles=tuple(role_objs),
        channels=tuple(channel_objs),
    )


def member_from_payload(payload: dict, guild: Guild) -> Member:
    user = payload.get("user") or {}
    member_id = int(user["id"])
    name = payload.get("nick") or user.get("global_name") or user.get("username") or ""

    role_ids = []
    for raw_id in payload.get("roles") or []:
        if guild.get_role(int(raw_id)) is None:
            logger.warning("Member %s has unknown role %s; ignoring it", member_id, raw_id)
            continue
        role_ids.append(int(raw_id))
    return guild.member(member_id, role_ids, name=name)


# ── JSON dumps ────────────────────────────────────────────────────────────────


def load_snapshot(path: str) -> tuple[Guild, dict[int, Member]]:
    """Load a dump written by ``dump_snapshot``.  Returns the guild and its members by id."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    guild = guild_from_payload(raw["guild"], raw.get("roles", []), raw.get("channels", []))
    members = {}
    for payload in raw.get("members", []):
        member = member_from_payload(payload, guild)
        members[member.id] = member
    return guild, members


def dump_snapshot(path: str, raw: dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(raw, f, indent=2)


# ── REST reader ───────────────────────────────────────────────────────────────


class DiscordReader:
    def __init__(self, bot_token: str, guild_id: str, session: requests.Session | None = None):
        self.token = bot_token
        self.guild_id = guild_id
        self.session = session or requests.Session()
        # Raw payloads of the last read, kept for dump_snapshot
        self.raw: dict[str, Any] = {}

    def _get(self, endpoint: str):
        """GET from Discord API.  One attempt; failures raise DiscordAPIError."""
        headers = {"Authorization": f"Bot {self.token}"}
        url = f"{DISCORD_API}{endpoint}"
        r = self.session.get(url, headers=headers, timeout=10)
        if r.status_code == 401:
            raise DiscordAPIError("Invalid Discord bot token", 401, endpoint)
        if not r.ok:
            raise DiscordAPIError(
                f"Discord {r.status_code} on {endpoint}: {r.text[:200]}", r.status_code, endpoint
            )
        return r.json()

    def read(self) -> Guild:
        print("\n📥  Reading Discord server …\n")

        guild = self._get(f"/guilds/{self.guild_id}")
        print(f"  ✔  Server: {guild['name']}")

        roles = self._get(f"/guilds/{self.guild_id}/roles") or []
        print(f"  ✔  Roles:    {len(roles)}")

        channels = self._get(f"/guilds/{self.guild_id}/channels") or []
        print(f"  ✔  Channels: {len(channels)}")

        self.raw = {"guild": guild, "roles": roles, "channels": channels, "members": []}
        return guild_from_payload(guild, roles, channels)

    def read_member(self, guild: Guild, user_id: int | str) -> Member:
        payload = self._get(f"/guilds/{self.guild_id}/members/{user_id}")
        self.raw.setdefault("members", []).append(payload)
        return member_from_payload(payload, guild)
