"""
permissions/hierarchy.py
────────────────────────
Total ordering of a guild's roles.

Higher position is senior.  Two roles stored at the same position are ordered
by creation sequence: the older role (lower sequence) is senior.  The public
role sits below every explicit role.
"""

from __future__ import annotations
from functools import cmp_to_key
from typing import TYPE_CHECKING, Iterable

from errors import InvalidArgumentError

if TYPE_CHECKING:
    from models import Member, Role


def compare_hierarchy(a: Role, b: Role) -> int:
    """Return 1 if ``a`` is senior to ``b``, -1 if junior, 0 if they are the same rank."""
    if a is None or b is None:
        raise InvalidArgumentError("Cannot compare a missing role")
    if a.guild_id != b.guild_id:
        raise InvalidArgumentError(
            f"Roles {a.name!r} and {b.name!r} are not from the same guild"
        )

    if a.is_public or b.is_public:
        if a.is_public and b.is_public:
            return 0
        return -1 if a.is_public else 1

    if a.position != b.position:
        return 1 if a.position > b.position else -1
    if a.sequence != b.sequence:
        return 1 if a.sequence < b.sequence else -1
    return 0


def sort_roles(roles: Iterable[Role]) -> list[Role]:
    """Roles ordered most senior first."""
    return sorted(roles, key=cmp_to_key(compare_hierarchy), reverse=True)


def highest_role(member: Member) -> Role:
    if member is None:
        raise InvalidArgumentError("Member is required")
    best = member.guild.public_role
    for role in member.roles:
        if compare_hierarchy(role, best) > 0:
            best = role
    return best
