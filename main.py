"""
main.py
───────
CLI entry point for the Discord permission inspector.

Reads a guild (live via the REST API, or from a saved snapshot file), asks
which member to inspect, and prints that member's effective permissions in
every channel plus which roles and members they may act on.

  python main.py          inspect
  python main.py --save   inspect and write the fetched snapshot to snapshot_file
"""

from __future__ import annotations
import getpass
import json
import logging
import os
import sys

from discord_reader import DiscordReader, dump_snapshot, load_snapshot
from errors import DiscordAPIError, InvalidArgumentError
from inspector import Inspector
from permissions.hierarchy import sort_roles

# ── ANSI ──────────────────────────────────────────────────────────────────────
BOLD = "\033[1m"
CYAN = "\033[96m"
YELLOW = "\033[93m"
RED = "\033[91m"
RESET = "\033[0m"


def banner():
    print(f"""
{BOLD}╔══════════════════════════════════════════════════╗
║   Discord Permission Inspector  v1.0             ║
║   Read-only · Snapshot-based · Offline-capable   ║
╚══════════════════════════════════════════════════╝{RESET}

Shows what a member can actually do in your Discord server.

{YELLOW}What is checked:{RESET}
  ✔ Role permissions (including @everyone)
  ✔ Channel overrides (@everyone → roles → member)
  ✔ Role hierarchy (who can kick / ban / edit whom)

{YELLOW}What is NOT checked:{RESET}
  ✘ Timeouts, bans and verification levels
  ✘ Slash-command specific permissions
""")


def prompt(label: str, secret: bool = False) -> str:
    while True:
        val = (
            getpass.getpass(f"  {label}: ") if secret else input(f"  {label}: ")
        ).strip()
        if val:
            return val
        print("  (required)")


def prompt_int(label: str) -> int:
    while True:
        val = prompt(label)
        if val.isdigit():
            return int(val)
        print("  (must be a number)")


def load_config() -> dict:
    path = os.path.join(os.path.dirname(__file__), "config.json")
    if os.path.exists(path):
        with open(path) as f:
            return json.load(f)
    return {}


def main():
    banner()

    config = load_config()
    logging.basicConfig(
        level=config.get("log_level", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    save = "--save" in sys.argv[1:]
    snapshot_file = config.get("snapshot_file", "")

    # ── Load the guild ────────────────────────────────────────────────────
    reader = None
    members = {}
    if snapshot_file and os.path.exists(snapshot_file) and not save:
        guild, members = load_snapshot(snapshot_file)
        print(f"\n  ✔  Loaded snapshot {snapshot_file}")
    else:
        discord_cfg = config.get("discord", {})
        discord_token = discord_cfg.get("token", "")
        guild_id = discord_cfg.get("guild_id", "")

        if not discord_token or not guild_id:
            print(f"\n{BOLD}Discord credentials:{RESET}")
            print("  Create a bot at https://discord.com/developers/applications")
            print("  Give it 'View Channels' and the Server Members intent.\n")
        if not discord_token:
            discord_token = prompt("Discord Bot Token", secret=True)
        if not guild_id:
            guild_id = prompt("Discord Server (Guild) ID")

        reader = DiscordReader(bot_token=discord_token, guild_id=guild_id)
        guild = reader.read()

    print(f"    Source: {guild.summary()}\n")

    # ── Pick a member ─────────────────────────────────────────────────────
    member_id = prompt_int("Member (user) ID to inspect")
    member = members.get(member_id)
    if member is None:
        if reader is None:
            print(f"  {RED}✘{RESET}  Member {member_id} is not in the snapshot.")
            sys.exit(1)
        member = reader.read_member(guild, member_id)

    # ── Inspect ───────────────────────────────────────────────────────────
    targets = [r for r in sort_roles(guild.roles) if not r.is_public]
    targets += [m for m in members.values() if m.id != member.id]
    Inspector(guild).run(member, targets).print()

    if save and reader is not None:
        if not snapshot_file:
            snapshot_file = "snapshot.json"
        dump_snapshot(snapshot_file, reader.raw)
        print(f"  {CYAN}Snapshot written to {snapshot_file}{RESET}\n")


def run():
    """Console entry point: main() plus clean exits on Ctrl-C and known errors."""
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n  Inspection cancelled.")
        sys.exit(0)
    except (DiscordAPIError, InvalidArgumentError) as e:
        print(f"\n  {RED}✘{RESET}  {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
