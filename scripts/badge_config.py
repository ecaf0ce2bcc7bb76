#!/usr/bin/env python3
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from _shared import int_or_default, load_json_file, resolve_path
from stat_fetch import DEFAULT_DATABASE_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config.json"
DEFAULT_SKINS_DIR = "skins"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_WORKERS = 4
MAX_JPEG_QUALITY = 95


@dataclass(frozen=True)
class BadgeConfig:
    database_url: str = DEFAULT_DATABASE_URL
    skins_dir: Path = Path(DEFAULT_SKINS_DIR)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    workers: int = DEFAULT_WORKERS
    jpeg_quality: int = 0


def config_path(root: Path) -> Path:
    return resolve_path(root, os.environ.get("BADGE_CONFIG", "").strip() or DEFAULT_CONFIG)


def validate_jpeg_quality(value: int) -> int:
    if value < 0 or value > MAX_JPEG_QUALITY:
        raise RuntimeError(f"jpeg_quality must be between 0 and {MAX_JPEG_QUALITY}")
    return value


def load_badge_config(root: Path) -> BadgeConfig:
    path = config_path(root)
    payload: dict = {}
    if path.is_file():
        payload = load_json_file(path)
    else:
        logger.warning("config file not found: %s, using defaults", path)

    database_url = (
        os.environ.get("BADGE_DATABASE_URL", "").strip()
        or str(payload.get("connection_string") or "").strip()
        or DEFAULT_DATABASE_URL
    )
    workers = int_or_default(payload.get("workers"), DEFAULT_WORKERS)
    if workers < 1:
        raise RuntimeError(f"workers must be a positive integer in {path}")

    return BadgeConfig(
        database_url=database_url,
        skins_dir=resolve_path(root, payload.get("skins_dir") or DEFAULT_SKINS_DIR),
        output_dir=resolve_path(root, payload.get("output_dir") or DEFAULT_OUTPUT_DIR),
        workers=workers,
        jpeg_quality=validate_jpeg_quality(int_or_default(payload.get("jpeg_quality"), 0)),
    )
