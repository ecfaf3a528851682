"""Shared guild fixtures for the permission engine tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the flat top-level modules importable without installing the project.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from models import Channel, Guild, PermissionOverride, Role  # noqa: E402
from permissions.bitmask import Permission  # noqa: E402

GUILD_ID = 1000
OWNER_ID = 1
MOD_USER_ID = 2
MEMBER_USER_ID = 3
PLAIN_USER_ID = 4

SEND = Permission.SEND_MESSAGES.raw
KICK = Permission.KICK_MEMBERS.raw
VIEW = Permission.VIEW_CHANNEL.raw


def make_guild(roles=(), channels=(), owner_id=OWNER_ID, public_permissions=0):
    return Guild(
        id=GUILD_ID,
        name="Test Guild",
        owner_id=owner_id,
        roles=(Role.public(GUILD_ID, public_permissions), *roles),
        channels=tuple(channels),
    )


@pytest.fixture
def member_role():
    return Role(id=10, guild_id=GUILD_ID, name="Member", permissions=SEND, position=0, sequence=10)


@pytest.fixture
def mod_role():
    return Role(id=11, guild_id=GUILD_ID, name="Mod", permissions=SEND | KICK, position=1, sequence=11)


@pytest.fixture
def bot_role():
    return Role(id=12, guild_id=GUILD_ID, name="Bot", position=0, managed=True, sequence=12)


@pytest.fixture
def scenario_guild(member_role, mod_role, bot_role):
    """Public(-1, 0), Member(0, SEND), Mod(1, SEND|KICK) plus a managed bot role."""
    return make_guild(roles=(member_role, mod_role, bot_role))


@pytest.fixture
def deny_send_channel(member_role):
    return Channel(
        id=500,
        guild_id=GUILD_ID,
        name="announcements",
        overrides=(PermissionOverride.for_role(member_role.id, denied=SEND),),
    )
