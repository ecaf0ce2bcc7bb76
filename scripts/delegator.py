#!/usr/bin/env python3
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

COMMANDS = {
    "render_badges": "render_badges.py",
    "find_players": "find_players.py",
}

ALIASES = {
    "render": "render_badges",
    "find": "find_players",
}


def print_usage() -> None:
    print(
        "usage: python scripts/delegator.py <command> [args]\n"
        "\n"
        "commands:\n"
        "  render_badges    Render stat badges for every loaded skin\n"
        "  find_players     List player IDs that would get a badge\n"
        "\n"
        "aliases:\n"
        "  render, find"
    )


def resolve_command(name: str) -> str | None:
    command = ALIASES.get(name, name)
    return COMMANDS.get(command)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in {"-h", "--help"}:
        print_usage()
        return 0

    script_name = resolve_command(argv[0])
    if script_name is None:
        print(f"error: unknown command '{argv[0]}'", file=sys.stderr)
        print_usage()
        return 2

    script_path = Path(__file__).resolve().parent / script_name
    if not script_path.is_file():
        print(f"error: missing script: {script_path}", file=sys.stderr)
        return 2

    return subprocess.run([sys.executable, str(script_path), *argv[1:]]).returncode


if __name__ == "__main__":
    raise SystemExit(main())
