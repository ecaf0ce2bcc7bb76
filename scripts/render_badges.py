#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from _shared import load_dotenv, project_root, resolve_path, setup_logging
from badge_config import load_badge_config, validate_jpeg_quality
from dispatcher import BadgeDispatcher
from render_cache import RenderCache
from skins import load_skins
from stat_fetch import StatFetcher, StatFetchError

DEFAULT_DELTA_HOURS = 6


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render stat badges for recently active players.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Render badges for all ranked players (ignores --delta)",
    )
    parser.add_argument(
        "--delta",
        type=int,
        default=DEFAULT_DELTA_HOURS,
        help="Render for players with activity in this many hours",
    )
    parser.add_argument("--pid", type=int, help="Render a badge for this player ID only")
    parser.add_argument("--limit", type=int, default=0, help="Only render this many players")
    parser.add_argument("--workers", type=int, help="Worker thread count (default from config)")
    parser.add_argument("--skins-dir", help="Directory of skin JSON files (default from config)")
    parser.add_argument("--output-dir", help="Root output directory (default from config)")
    parser.add_argument(
        "--jpeg-quality",
        type=int,
        help="Transcode badges to JPEG at this quality and drop the PNG",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    root = project_root()
    load_dotenv(root / ".env")
    setup_logging(args.verbose)

    try:
        config = load_badge_config(root)
        skins_dir = resolve_path(root, args.skins_dir) or config.skins_dir
        output_dir = resolve_path(root, args.output_dir) or config.output_dir
        workers = args.workers if args.workers is not None else config.workers
        if workers < 1:
            raise RuntimeError("--workers must be at least 1")
        jpeg_quality = config.jpeg_quality
        if args.jpeg_quality is not None:
            jpeg_quality = validate_jpeg_quality(args.jpeg_quality)
        skins = load_skins(skins_dir, root)
    except RuntimeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if not skins:
        print(f"error: no usable skins in {skins_dir}", file=sys.stderr)
        return 1

    fetcher = StatFetcher(config.database_url, pool_size=workers)
    try:
        if args.pid is not None:
            player_ids = [args.pid]
        else:
            delta = -1 if args.all else args.delta
            player_ids = fetcher.find_players(delta, args.limit)

        dispatcher = BadgeDispatcher(
            fetcher,
            skins,
            output_dir,
            workers=workers,
            cache=RenderCache(),
            jpeg_quality=jpeg_quality,
        )
        report = dispatcher.run(player_ids)
    except StatFetchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        fetcher.close()

    print(
        f"ok: rendered {report.rendered} badge(s) for {len(player_ids)} player(s) "
        f"into {output_dir}"
    )
    if report.skipped_players:
        print(f"warning: skipped {report.skipped_players} player(s) without stats", file=sys.stderr)
    if report.failed:
        print(f"warning: {report.failed} badge(s) failed to render", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
