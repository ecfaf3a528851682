"""
permissions/interaction.py
──────────────────────────
Whether one holder (member or role) may act on another: kick, ban, move a
member, or edit, delete, reorder a role.

Only the hierarchy is checked here, not whether the actor holds KICK_MEMBERS,
MANAGE_ROLES etc.; combine with resolver.has_permission for that.
"""

from __future__ import annotations
from typing import Union

from errors import InvalidArgumentError
from models import Member, Role
from permissions.hierarchy import compare_hierarchy, highest_role

Holder = Union[Member, Role]


def _guild_id(holder: Holder) -> int:
    if isinstance(holder, (Member, Role)):
        return holder.guild_id
    raise InvalidArgumentError(f"Expected a Member or Role, got {type(holder).__name__}")


def _effective_role(holder: Holder) -> Role:
    return highest_role(holder) if isinstance(holder, Member) else holder


def can_interact(actor: Holder, target: Holder) -> bool:
    if actor is None or target is None:
        raise InvalidArgumentError("Both actor and target are required")
    if _guild_id(actor) != _guild_id(target):
        raise InvalidArgumentError("Actor and target are not from the same guild")

    if isinstance(actor, Member) and actor.is_owner:
        return True
    if isinstance(target, Member) and target.is_owner:
        return False
    if isinstance(target, Role) and target.managed:
        return False

    return compare_hierarchy(_effective_role(actor), _effective_role(target)) > 0
