"""
models.py
─────────
Immutable guild snapshots consumed by the permission engine.

A reader (e.g. DiscordReader) converts platform payloads into a Guild plus
Members.  Every class here is a frozen dataclass and every collection is a
tuple, so a snapshot never changes once it has been handed to the engine and
can be shared between threads without copying.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from errors import InvalidArgumentError
from permissions.bitmask import ALL_PERMISSIONS
from permissions.hierarchy import sort_roles

# Sentinel position of the implicit @everyone role
PUBLIC_ROLE_POSITION = -1

# Discord snowflakes carry the creation timestamp above bit 22
_SNOWFLAKE_TIMESTAMP_SHIFT = 22


class ChannelType(Enum):
    TEXT = "text"
    VOICE = "voice"
    CATEGORY = "category"
    FORUM = "forum"
    ANNOUNCE = "announce"
    STAGE = "stage"


class HolderType(Enum):
    ROLE = "role"
    MEMBER = "member"


@dataclass(frozen=True)
class Role:
    id: int
    guild_id: int
    name: str
    permissions: int = 0  # raw permission bitfield
    position: int = 0  # higher = more senior
    managed: bool = False  # owned by a bot / integration
    is_public: bool = False  # the guild's @everyone role
    color: int | None = None  # 0xRRGGBB integer, or None
    # Creation-order tiebreak; derived from the snowflake when not given
    sequence: int | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.sequence is None:
            object.__setattr__(self, "sequence", self.id >> _SNOWFLAKE_TIMESTAMP_SHIFT)
        if self.is_public and self.position != PUBLIC_ROLE_POSITION:
            object.__setattr__(self, "position", PUBLIC_ROLE_POSITION)

    @classmethod
    def public(cls, guild_id: int, permissions: int = 0) -> Role:
        """The @everyone role.  Discord gives it the guild's own id."""
        return cls(
            id=guild_id,
            guild_id=guild_id,
            name="@everyone",
            permissions=permissions,
            position=PUBLIC_ROLE_POSITION,
            is_public=True,
        )

    @property
    def mention(self) -> str:
        return "@everyone" if self.is_public else f"<@&{self.id}>"


@dataclass(frozen=True)
class PermissionOverride:
    """
    A channel-level exception for one role or one member.

    Every permission bit falls in exactly one of ``allowed``, ``denied`` or
    ``inherit``; ``inherit`` is derived, so only overlapping allow/deny can
    break that and it is rejected here.
    """

    holder_type: HolderType
    holder_id: int
    allowed: int = 0
    denied: int = 0

    def __post_init__(self):
        if not isinstance(self.holder_type, HolderType):
            raise InvalidArgumentError(f"Unknown override holder type: {self.holder_type!r}")
        if self.allowed & self.denied:
            raise InvalidArgumentError(
                f"Override for {self.holder_type.value} {self.holder_id} both allows and "
                f"denies {self.allowed & self.denied:#x}"
            )

    @classmethod
    def for_role(cls, role_id: int, allowed: int = 0, denied: int = 0) -> PermissionOverride:
        return cls(HolderType.ROLE, role_id, allowed, denied)

    @classmethod
    def for_member(cls, member_id: int, allowed: int = 0, denied: int = 0) -> PermissionOverride:
        return cls(HolderType.MEMBER, member_id, allowed, denied)

    @property
    def inherit(self) -> int:
        return ALL_PERMISSIONS & ~(self.allowed | self.denied)

    @property
    def is_role_override(self) -> bool:
        return self.holder_type is HolderType.ROLE

    @property
    def is_member_override(self) -> bool:
        return self.holder_type is HolderType.MEMBER


@dataclass(frozen=True)
class Channel:
    id: int
    guild_id: int
    name: str
    type: ChannelType = ChannelType.TEXT
    position: int = 0
    category_id: int | None = None  # refers to a CATEGORY channel in the same guild
    overrides: tuple[PermissionOverride, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "overrides", tuple(self.overrides))
        seen: set[tuple[HolderType, int]] = set()
        for ov in self.overrides:
            key = (ov.holder_type, ov.holder_id)
            if key in seen:
                raise InvalidArgumentError(
                    f"Channel #{self.name} has two overrides for {ov.holder_type.value} {ov.holder_id}"
                )
            seen.add(key)

    def override_for(self, holder_type: HolderType, holder_id: int) -> PermissionOverride | None:
        for ov in self.overrides:
            if ov.holder_type is holder_type and ov.holder_id == holder_id:
                return ov
        return None

    def role_override(self, role: Role) -> PermissionOverride | None:
        return self.override_for(HolderType.ROLE, role.id)

    def member_override(self, member: Member) -> PermissionOverride | None:
        return self.override_for(HolderType.MEMBER, member.id)


@dataclass(frozen=True)
class Guild:
    """
    A complete, read-only description of a guild's roles and channels.
    Members are built against it with ``Guild.member``.
    """

    id: int
    name: str
    owner_id: int
    roles: tuple[Role, ...] = ()
    channels: tuple[Channel, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "roles", tuple(self.roles))
        object.__setattr__(self, "channels", tuple(self.channels))

        public = [r for r in self.roles if r.is_public]
        if len(public) != 1:
            raise InvalidArgumentError(
                f"Guild {self.name!r} must have exactly one public role, found {len(public)}"
            )
        for role in self.roles:
            if role.guild_id != self.id:
                raise InvalidArgumentError(f"Role {role.name!r} belongs to guild {role.guild_id}")

        role_ids = set()
        for role in self.roles:
            if role.id in role_ids:
                raise InvalidArgumentError(f"Guild {self.name!r} lists role {role.id} twice")
            role_ids.add(role.id)

        for ch in self.channels:
            if ch.guild_id != self.id:
                raise InvalidArgumentError(f"Channel #{ch.name} belongs to guild {ch.guild_id}")
            for ov in ch.overrides:
                if ov.is_role_override and ov.holder_id not in role_ids:
                    raise InvalidArgumentError(
                        f"Channel #{ch.name} overrides role {ov.holder_id}, which is not in this guild"
                    )

    @property
    def public_role(self) -> Role:
        return next(r for r in self.roles if r.is_public)

    def get_role(self, role_id: int) -> Role | None:
        for role in self.roles:
            if role.id == role_id:
                return role
        return None

    def get_channel(self, channel_id: int) -> Channel | None:
        for ch in self.channels:
            if ch.id == channel_id:
                return ch
        return None

    def member(self, member_id: int, role_ids: Iterable[int] = (), name: str = "") -> Member:
        """
        Build a Member snapshot for this guild.
        Unknown role ids are an error; the public role id, if listed, is dropped.
        """
        roles = []
        for role_id in role_ids:
            role = self.get_role(int(role_id))
            if role is None:
                raise InvalidArgumentError(f"Role {role_id} is not part of guild {self.name!r}")
            roles.append(role)
        return Member(id=member_id, guild=self, roles=tuple(roles), name=name)

    def summary(self) -> str:
        return f"'{self.name}': {len(self.roles)} roles, {len(self.channels)} channels"


@dataclass(frozen=True)
class Member:
    id: int
    guild: Guild = field(repr=False, compare=False)
    roles: tuple[Role, ...] = ()  # explicit roles, most senior first, @everyone excluded
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.guild, Guild):
            raise InvalidArgumentError(f"Member {self.id} needs the Guild it belongs to")
        roles: dict[int, Role] = {}
        for role in self.roles:
            if role.guild_id != self.guild.id or role not in self.guild.roles:
                raise InvalidArgumentError(
                    f"Role {role.name!r} is not part of guild {self.guild.name!r}"
                )
            if not role.is_public:
                roles[role.id] = role
        object.__setattr__(self, "roles", tuple(sort_roles(roles.values())))

    @property
    def guild_id(self) -> int:
        return self.guild.id

    @property
    def is_owner(self) -> bool:
        return self.guild.owner_id == self.id

    @property
    def effective_roles(self) -> tuple[Role, ...]:
        """Explicit roles followed by the implicit public role; never empty."""
        return self.roles + (self.guild.public_role,)

    @property
    def display_name(self) -> str:
        return self.name or str(self.id)
