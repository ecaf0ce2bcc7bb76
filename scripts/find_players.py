#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from _shared import load_dotenv, project_root, setup_logging
from badge_config import load_badge_config
from stat_fetch import StatFetcher, StatFetchError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="List player IDs that would get a badge.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--all", action="store_true", help="List all ranked players")
    parser.add_argument(
        "--delta",
        type=int,
        default=6,
        help="List players with activity in this many hours",
    )
    parser.add_argument("--limit", type=int, default=0, help="Only list this many players")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    root = project_root()
    load_dotenv(root / ".env")
    setup_logging()

    try:
        config = load_badge_config(root)
    except RuntimeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    fetcher = StatFetcher(config.database_url, pool_size=1)
    try:
        player_ids = fetcher.find_players(-1 if args.all else args.delta, args.limit)
    except StatFetchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        fetcher.close()

    for player_id in player_ids:
        print(player_id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
