#!/usr/bin/env python3
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

DEFAULT_CONFIG = "config.json"
DEFAULT_SKINS_DIR = "skins"


def load_dotenv(path: Path) -> None:
    if not path.is_file():
        return
    # Minimal .env parser to avoid external deps.
    with path.open("r", encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()
            if key and key not in os.environ:
                os.environ[key] = value


def check_env(root: Path) -> bool:
    ok = True
    config_value = os.environ.get("BADGE_CONFIG", "").strip() or DEFAULT_CONFIG
    config_path = Path(config_value)
    if not config_path.is_absolute():
        config_path = root / config_path
    if config_path.is_file():
        print(f"ok: config file exists: {config_path}")
    else:
        print(f"warning: config file not found: {config_path}", file=sys.stderr)

    if os.environ.get("BADGE_DATABASE_URL", "").strip():
        print("ok: BADGE_DATABASE_URL is set")
    elif not config_path.is_file():
        print("warning: BADGE_DATABASE_URL is not set, using the default database", file=sys.stderr)

    skins_dir = root / DEFAULT_SKINS_DIR
    skin_files = sorted(skins_dir.glob("*.json")) if skins_dir.is_dir() else []
    if skin_files:
        print(f"ok: {len(skin_files)} skin file(s) in {skins_dir}")
    else:
        print(f"warning: no skin files in {skins_dir}", file=sys.stderr)
        ok = False
    return ok


def print_usage() -> None:
    print(
        "usage: python index.py <command> [args]\n"
        "\n"
        "commands:\n"
        "  render_badges    Render stat badges for recently active players\n"
        "  find_players     List player IDs that would get a badge\n"
        "  check_env        Validate config, database URL and skins\n"
        "\n"
        "aliases:\n"
        "  render, find, check\n"
        "\n"
        "notes:\n"
        "  - render_badges --pid N renders a single player.\n"
        "  - Run without args to show this help plus env status."
    )


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    root = Path(__file__).resolve().parent
    load_dotenv(root / ".env")

    if not argv or argv[0] in {"-h", "--help"}:
        ok = check_env(root)
        print_usage()
        return 0 if ok else 1

    if argv[0] in {"check_env", "check"}:
        return 0 if check_env(root) else 1

    delegator = root / "scripts" / "delegator.py"
    if not delegator.is_file():
        print(f"error: missing delegator script at {delegator}", file=sys.stderr)
        return 1

    return subprocess.run([sys.executable, str(delegator), *argv], cwd=str(root)).returncode


if __name__ == "__main__":
    raise SystemExit(main())
