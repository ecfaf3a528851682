"""
inspector.py
────────────
The inspection driver.

Takes a Guild snapshot and one Member, then computes:
  1. Guild-scope permissions
  2. Per-channel permissions (and what each channel adds or removes)
  3. Hierarchy verdicts against other members / roles
  4. A printable report

Pure read-only use of the permission engine; no network access.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from models import Channel, ChannelType, Guild, Member, Role
from permissions.bitmask import format_mask, labels
from permissions.hierarchy import highest_role
from permissions.interaction import Holder, can_interact
from permissions.resolver import resolve_channel_permissions, resolve_guild_permissions

# ── ANSI colours ──────────────────────────────────────────────────────────────
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
CYAN = "\033[96m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"


def _ok(msg):
    print(f"  {GREEN}✔{RESET}  {msg}")


def _warn(msg):
    print(f"  {YELLOW}⚠{RESET}  {msg}")


def _no(msg):
    print(f"  {RED}✘{RESET}  {msg}")


def _head(msg):
    print(f"\n{BOLD}{msg}{RESET}")


def _holder_label(holder: Holder) -> str:
    if isinstance(holder, Member):
        return f"member {holder.display_name}"
    return f"role {holder.name}"


# ── Inspection report ─────────────────────────────────────────────────────────


@dataclass
class ChannelResult:
    channel: Channel
    mask: int
    gained: int  # bits set here but not at guild scope
    lost: int  # bits set at guild scope but not here


@dataclass
class PermissionReport:
    member: Member
    guild_mask: int = 0
    top_role: Role | None = None

    channels: list[ChannelResult] = field(default_factory=list)
    can_act_on: list[str] = field(default_factory=list)
    cannot_act_on: list[str] = field(default_factory=list)

    def print(self):
        _head("═══════════════════ Permission Report ═══════════════════")

        print(f"\n  Member      : {BOLD}{self.member.display_name}{RESET} ({self.member.id})")
        if self.member.is_owner:
            print(f"  Owner       : {CYAN}yes{RESET}")
        if self.top_role is not None:
            print(f"  Top role    : {self.top_role.name}")
        print(f"  Guild mask  : {format_mask(self.guild_mask)}")
        for name in labels(self.guild_mask):
            print(f"             {DIM}↳ {name}{RESET}")

        _head("Channels")
        if not self.channels:
            print("  —  No channels found.")
        for result in self.channels:
            label = f"[{result.channel.type.value}] #{result.channel.name}"
            if not result.gained and not result.lost:
                _ok(f"{label}  {DIM}(same as guild){RESET}")
                continue
            _warn(f"{label}  {format_mask(result.mask)}")
            for name in labels(result.gained):
                print(f"             {GREEN}+ {name}{RESET}")
            for name in labels(result.lost):
                print(f"             {RED}- {name}{RESET}")

        if self.can_act_on or self.cannot_act_on:
            _head("Hierarchy")
            for label in self.can_act_on:
                _ok(f"can act on {label}")
            for label in self.cannot_act_on:
                _no(f"cannot act on {label}")
        print()


# ── Inspector ─────────────────────────────────────────────────────────────────


class Inspector:
    def __init__(self, guild: Guild):
        self.guild = guild

    def run(self, member: Member, targets: Iterable[Holder] = ()) -> PermissionReport:
        report = PermissionReport(member=member)
        report.guild_mask = resolve_guild_permissions(member)
        report.top_role = highest_role(member)

        for channel in self.guild.channels:
            if channel.type is ChannelType.CATEGORY:
                continue
            mask = resolve_channel_permissions(member, channel)
            report.channels.append(
                ChannelResult(
                    channel=channel,
                    mask=mask,
                    gained=mask & ~report.guild_mask,
                    lost=report.guild_mask & ~mask,
                )
            )

        for target in targets:
            if can_interact(member, target):
                report.can_act_on.append(_holder_label(target))
            else:
                report.cannot_act_on.append(_holder_label(target))

        return report
