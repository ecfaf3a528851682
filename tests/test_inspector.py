from conftest import GUILD_ID, SEND, make_guild
from inspector import Inspector
from models import Channel, ChannelType, PermissionOverride


def test_report_lists_channel_differences_and_hierarchy(member_role, mod_role, bot_role, capsys):
    channels = (
        Channel(id=1, guild_id=GUILD_ID, name="Info", type=ChannelType.CATEGORY),
        Channel(id=2, guild_id=GUILD_ID, name="general"),
        Channel(
            id=3,
            guild_id=GUILD_ID,
            name="announcements",
            overrides=(PermissionOverride.for_role(member_role.id, denied=SEND),),
        ),
    )
    guild = make_guild(roles=(member_role, mod_role, bot_role), channels=channels)
    member = guild.member(3, [member_role.id], name="alice")

    report = Inspector(guild).run(member, targets=[mod_role, guild.public_role, bot_role])

    assert report.guild_mask == SEND
    assert report.top_role == member_role
    assert [r.channel.name for r in report.channels] == ["general", "announcements"]
    general, announcements = report.channels
    assert general.gained == 0 and general.lost == 0
    assert announcements.lost == SEND and announcements.mask == 0
    assert report.can_act_on == ["role @everyone"]
    assert report.cannot_act_on == ["role Mod", "role Bot"]

    report.print()
    out = capsys.readouterr().out
    assert "alice" in out
    assert "- Send Messages" in out
    assert "cannot act on role Mod" in out
