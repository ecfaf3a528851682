"""
permissions/bitmask.py
──────────────────────
Discord permission bit table and the set operations over raw 64-bit masks.

Every permission has a fixed bit offset. A raw mask is a plain int; helpers here
convert between masks and lists of Permission members and test containment.
Bits with no entry in the table are carried in raw masks but never surface as
Permission members.
"""

from __future__ import annotations
from enum import Enum
from typing import Iterable


class Permission(Enum):
    """A named capability.  The value is the bit offset."""

    def __new__(cls, offset: int, label: str, is_guild: bool, is_channel: bool):
        member = object.__new__(cls)
        member._value_ = offset
        member.label = label
        member.is_guild = is_guild
        member.is_channel = is_channel
        return member

    # ── general server / channel ──────────────────────────────────────────
    MANAGE_CHANNEL = (4, "Manage Channels", True, True)
    MANAGE_SERVER = (5, "Manage Server", True, False)
    VIEW_AUDIT_LOGS = (7, "View Audit Logs", True, False)
    VIEW_CHANNEL = (10, "View Channel(s)", True, True)
    VIEW_GUILD_INSIGHTS = (19, "View Server Insights", True, False)
    MANAGE_ROLES = (28, "Manage Roles", True, True)
    MANAGE_PERMISSIONS = (28, "Manage Permissions", False, True)  # alias of MANAGE_ROLES
    MANAGE_WEBHOOKS = (29, "Manage Webhooks", True, True)
    MANAGE_EMOJIS_AND_STICKERS = (30, "Manage Emojis and Stickers", True, False)
    MANAGE_EVENTS = (33, "Manage Events", True, True)

    # ── membership ────────────────────────────────────────────────────────
    CREATE_INSTANT_INVITE = (0, "Create Instant Invite", True, True)
    KICK_MEMBERS = (1, "Kick Members", True, False)
    BAN_MEMBERS = (2, "Ban Members", True, False)
    CHANGE_NICKNAME = (26, "Change Nickname", True, False)
    MANAGE_NICKNAMES = (27, "Manage Nicknames", True, False)
    MODERATE_MEMBERS = (40, "Timeout Members", True, False)

    # ── text ──────────────────────────────────────────────────────────────
    ADD_REACTIONS = (6, "Add Reactions", True, True)
    SEND_MESSAGES = (11, "Send Messages", True, True)
    SEND_TTS_MESSAGES = (12, "Send TTS Messages", True, True)
    MANAGE_MESSAGES = (13, "Manage Messages", True, True)
    EMBED_LINKS = (14, "Embed Links", True, True)
    ATTACH_FILES = (15, "Attach Files", True, True)
    READ_MESSAGE_HISTORY = (16, "Read History", True, True)
    MENTION_EVERYONE = (17, "Mention Everyone", True, True)
    USE_EXTERNAL_EMOJIS = (18, "Use External Emojis", True, True)
    USE_APPLICATION_COMMANDS = (31, "Use Application Commands", True, True)
    USE_EXTERNAL_STICKERS = (37, "Use External Stickers", True, True)

    # ── threads ───────────────────────────────────────────────────────────
    MANAGE_THREADS = (34, "Manage Threads", True, True)
    CREATE_PUBLIC_THREADS = (35, "Create Public Threads", True, True)
    CREATE_PRIVATE_THREADS = (36, "Create Private Threads", True, True)
    SEND_MESSAGES_IN_THREADS = (38, "Send Messages in Threads", True, True)

    # ── voice / stage ─────────────────────────────────────────────────────
    PRIORITY_SPEAKER = (8, "Priority Speaker", True, True)
    STREAM = (9, "Video", True, True)
    CONNECT = (20, "Connect", True, True)
    SPEAK = (21, "Speak", True, True)
    MUTE_MEMBERS = (22, "Mute Members", True, True)
    DEAFEN_MEMBERS = (23, "Deafen Members", True, True)
    MOVE_MEMBERS = (24, "Move Members", True, True)
    USE_VAD = (25, "Use Voice Activity", True, True)
    REQUEST_TO_SPEAK = (32, "Request to Speak", True, True)
    START_EMBEDDED_ACTIVITIES = (39, "Launch Activities in Voice Channels", True, True)

    # ── advanced ──────────────────────────────────────────────────────────
    ADMINISTRATOR = (3, "Administrator", True, False)

    @property
    def offset(self) -> int:
        return self.value

    @property
    def raw(self) -> int:
        return 1 << self.value


def to_set(raw: int) -> list[Permission]:
    """Permissions whose bit is set in ``raw``, in offset order.  Unknown bits are ignored."""
    return sorted(
        (perm for perm in Permission if raw & perm.raw == perm.raw),
        key=lambda p: p.offset,
    )


def to_raw(permissions: Iterable[Permission]) -> int:
    raw = 0
    for perm in permissions:
        raw |= perm.raw
    return raw


def contains(raw: int, required: int) -> bool:
    """True if every bit of ``required`` is also set in ``raw``."""
    while required:
        bit = required & -required
        if not raw & bit:
            return False
        required ^= bit
    return True


def from_offset(offset: int) -> Permission | None:
    try:
        return Permission(offset)
    except ValueError:
        return None


ALL_PERMISSIONS = to_raw(Permission)
ALL_GUILD_PERMISSIONS = to_raw(p for p in Permission if p.is_guild)
ALL_CHANNEL_PERMISSIONS = to_raw(p for p in Permission if p.is_channel)
ALL_TEXT_PERMISSIONS = to_raw(
    [
        Permission.ADD_REACTIONS,
        Permission.SEND_MESSAGES,
        Permission.SEND_TTS_MESSAGES,
        Permission.MANAGE_MESSAGES,
        Permission.EMBED_LINKS,
        Permission.ATTACH_FILES,
        Permission.USE_EXTERNAL_EMOJIS,
        Permission.USE_EXTERNAL_STICKERS,
        Permission.READ_MESSAGE_HISTORY,
        Permission.MENTION_EVERYONE,
        Permission.USE_APPLICATION_COMMANDS,
        Permission.MANAGE_THREADS,
        Permission.CREATE_PUBLIC_THREADS,
        Permission.CREATE_PRIVATE_THREADS,
        Permission.SEND_MESSAGES_IN_THREADS,
    ]
)
ALL_VOICE_PERMISSIONS = to_raw(
    [
        Permission.STREAM,
        Permission.CONNECT,
        Permission.SPEAK,
        Permission.MUTE_MEMBERS,
        Permission.DEAFEN_MEMBERS,
        Permission.MOVE_MEMBERS,
        Permission.USE_VAD,
        Permission.PRIORITY_SPEAKER,
        Permission.REQUEST_TO_SPEAK,
        Permission.START_EMBEDDED_ACTIVITIES,
    ]
)


def format_mask(raw: int) -> str:
    return f"{raw:#018x}"


def labels(raw: int) -> list[str]:
    """Human-readable names of the permissions in ``raw``."""
    return [perm.label for perm in to_set(raw)]
