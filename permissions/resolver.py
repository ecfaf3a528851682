"""
permissions/resolver.py
───────────────────────
Effective permissions of a member (or a single role) at guild or channel scope.

Channel overrides are applied in tiers, each tier denying first and then
allowing:
  1. the @everyone override
  2. the member's role overrides, unioned across roles (allow beats deny)
  3. the member's own override
Administrator in the base mask skips the overrides and grants everything.

has_permission additionally treats a channel the member cannot see (or, for
voice, connect to) as granting nothing; the raw resolvers stay literal.
"""

from __future__ import annotations
import logging

from errors import InvalidArgumentError
from models import Channel, ChannelType, Guild, Member, PermissionOverride, Role
from permissions.bitmask import (
    ALL_CHANNEL_PERMISSIONS,
    ALL_PERMISSIONS,
    Permission,
    contains,
    to_raw,
)

logger = logging.getLogger(__name__)


def _apply(mask: int, denied: int, allowed: int) -> int:
    return (mask & ~denied) | allowed


def _apply_override(mask: int, override: PermissionOverride | None) -> int:
    if override is None:
        return mask
    return _apply(mask, override.denied, override.allowed)


def _check_channel(guild_id: int, channel: Channel) -> None:
    if channel is None:
        raise InvalidArgumentError("Channel is required")
    if channel.guild_id != guild_id:
        raise InvalidArgumentError(
            f"Channel #{channel.name} belongs to guild {channel.guild_id}, not {guild_id}"
        )


def _check_role(guild: Guild, role: Role) -> None:
    if guild is None or role is None:
        raise InvalidArgumentError("Guild and role are required")
    if role.guild_id != guild.id:
        raise InvalidArgumentError(f"Role {role.name!r} is not part of guild {guild.name!r}")


def _apply_member_overrides(mask: int, member: Member, channel: Channel) -> int:
    mask = _apply_override(mask, channel.role_override(member.guild.public_role))

    role_denied = 0
    role_allowed = 0
    for role in member.roles:
        override = channel.role_override(role)
        if override is not None:
            role_denied |= override.denied
            role_allowed |= override.allowed
    mask = _apply(mask, role_denied, role_allowed)

    return _apply_override(mask, channel.member_override(member))


def has_channel_access(mask: int, channel: Channel) -> bool:
    """A channel is unusable without VIEW_CHANNEL, and a voice channel without CONNECT."""
    if not mask & Permission.VIEW_CHANNEL.raw:
        return False
    if channel.type in (ChannelType.VOICE, ChannelType.STAGE):
        return bool(mask & Permission.CONNECT.raw)
    return True


def resolve_guild_permissions(member: Member) -> int:
    """OR of the public role and every explicit role: the member's base mask."""
    if member is None:
        raise InvalidArgumentError("Member is required")
    mask = member.guild.public_role.permissions
    for role in member.roles:
        mask |= role.permissions
    return mask


def resolve_channel_permissions(member: Member, channel: Channel) -> int:
    base = resolve_guild_permissions(member)
    _check_channel(member.guild_id, channel)

    if base & Permission.ADMINISTRATOR.raw:
        return ALL_PERMISSIONS

    mask = _apply_member_overrides(base, member, channel)
    logger.debug(
        "Resolved %s in #%s: base=%#x final=%#x", member.display_name, channel.name, base, mask
    )
    return mask


def resolve_explicit_permissions(member: Member, channel: Channel, include_roles: bool = True) -> int:
    """
    The channel overrides applied literally, with no administrator bypass.
    With ``include_roles=False`` the overrides start from an empty mask, so
    only what the channel itself grants shows up.
    """
    if member is None:
        raise InvalidArgumentError("Member is required")
    _check_channel(member.guild_id, channel)
    start = resolve_guild_permissions(member) if include_roles else 0
    return _apply_member_overrides(start, member, channel)


def resolve_explicit_role_permissions(
    guild: Guild, role: Role, channel: Channel, include_roles: bool = True
) -> int:
    """@everyone override then ``role``'s override, over the two roles' masks (or 0)."""
    _check_role(guild, role)
    _check_channel(guild.id, channel)

    public = guild.public_role
    mask = public.permissions | role.permissions if include_roles else 0
    mask = _apply_override(mask, channel.role_override(public))
    if not role.is_public:
        mask = _apply_override(mask, channel.role_override(role))
    return mask


def resolve_role_permissions(guild: Guild, role: Role, channel: Channel | None = None) -> int:
    """
    What a member holding only ``role`` (plus @everyone) would get.
    Used for per-role reports; member overrides play no part.  In a channel,
    administrator yields every channel permission and a role that cannot see
    the channel gets nothing.
    """
    _check_role(guild, role)
    if channel is None:
        return guild.public_role.permissions | role.permissions

    mask = resolve_explicit_role_permissions(guild, role, channel)
    if mask & Permission.ADMINISTRATOR.raw:
        return ALL_CHANNEL_PERMISSIONS
    if not mask & Permission.VIEW_CHANNEL.raw:
        return 0
    return mask


def has_permission(member: Member, *permissions: Permission, channel: Channel | None = None) -> bool:
    """
    True if ``member`` effectively holds every permission given.
    The guild owner and administrators pass unconditionally.  In a channel the
    member holds nothing unless they can access it (see has_channel_access).
    """
    if member is None:
        raise InvalidArgumentError("Member is required")
    if channel is not None:
        _check_channel(member.guild_id, channel)
    if member.is_owner:
        return True
    base = resolve_guild_permissions(member)
    if base & Permission.ADMINISTRATOR.raw:
        return True
    if channel is None:
        mask = base
    else:
        mask = resolve_channel_permissions(member, channel)
        if not has_channel_access(mask, channel):
            mask = 0
    return contains(mask, to_raw(permissions))


def missing_permissions(
    member: Member, *permissions: Permission, channel: Channel | None = None
) -> list[Permission]:
    """The subset of ``permissions`` the member lacks, in the order given."""
    return [p for p in permissions if not has_permission(member, p, channel=channel)]
