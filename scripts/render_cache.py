#!/usr/bin/env python3
"""Caches shared by every render in a batch.

Base canvases are keyed by skin name and fonts by ``(font, size)``. Each
key is built at most once: lookups go through a per-key lock, so workers
racing on the same first use wait for one build instead of each doing
their own. Cached objects are never mutated after they are stored.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable

from PIL import Image, ImageFont

from colored_string import to_rgb255
from skins import SkinDefinition

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def open_rgba(path: Path, kind: str) -> Image.Image:
    if not path.is_file():
        raise RuntimeError(f"{kind} image not found: {path}")
    try:
        with Image.open(path) as source:
            return source.convert("RGBA")
    except OSError as exc:
        raise RuntimeError(f"unreadable {kind} image {path}: {exc}") from exc


def build_base_canvas(skin: SkinDefinition) -> Image.Image:
    if skin.background_color is not None:
        fill = (*to_rgb255(skin.background_color), 255)
    else:
        fill = TRANSPARENT
    canvas = Image.new("RGBA", (skin.width, skin.height), fill)

    if skin.background is not None:
        tile = open_rgba(skin.background, "background")
        for tile_x in range(0, skin.width, tile.width):
            for tile_y in range(0, skin.height, tile.height):
                canvas.paste(tile, (tile_x, tile_y), tile)

    if skin.overlay is not None:
        overlay = open_rgba(skin.overlay, "overlay")
        canvas.paste(overlay, (0, 0), overlay)
    return canvas


def load_font(name: str, size: float) -> ImageFont.FreeTypeFont:
    if not name:
        return ImageFont.load_default(size)
    try:
        return ImageFont.truetype(name, size)
    except OSError as exc:
        raise RuntimeError(f"unable to load font {name!r}: {exc}") from exc


class RenderCache:
    def __init__(self) -> None:
        self._canvases: dict[str, Image.Image] = {}
        self._fonts: dict[tuple[str, float], ImageFont.FreeTypeFont] = {}
        self._locks: dict[tuple, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: tuple) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def base_canvas(self, skin: SkinDefinition) -> Image.Image:
        canvas = self._canvases.get(skin.name)
        if canvas is not None:
            return canvas
        with self._lock_for(("canvas", skin.name)):
            canvas = self._canvases.get(skin.name)
            if canvas is None:
                canvas = build_base_canvas(skin)
                self._canvases[skin.name] = canvas
                logger.debug("built base canvas for skin %s", skin.name)
        return canvas

    def font(self, name: str, size: float) -> ImageFont.FreeTypeFont:
        key = (name, float(size))
        font = self._fonts.get(key)
        if font is not None:
            return font
        with self._lock_for(("font", *key)):
            font = self._fonts.get(key)
            if font is None:
                font = load_font(name, size)
                self._fonts[key] = font
        return font

    def warm(self, skins: Iterable[SkinDefinition]) -> list[str]:
        """Build base canvases and configured fonts up front.

        Returns the names of skins whose assets failed to load; those
        skins stay usable and fail again per render.
        """
        failed = []
        for skin in skins:
            try:
                self.base_canvas(skin)
                for placement in iter_placements(skin):
                    if placement.enabled:
                        self.font(placement.font, placement.size)
            except RuntimeError as exc:
                logger.warning("skin %s failed to warm up: %s", skin.name, exc)
                failed.append(skin.name)
        return failed

    def __len__(self) -> int:
        return len(self._canvases) + len(self._fonts)


def iter_placements(skin: SkinDefinition):
    yield skin.nick
    yield from skin.game_type
    yield from skin.elo
    yield from skin.rank
    for placement in (
        skin.win_pct_label,
        skin.win_pct,
        skin.wins,
        skin.losses,
        skin.kd_ratio_label,
        skin.kd_ratio,
        skin.kills,
        skin.deaths,
        skin.playing_time,
        skin.no_stats,
    ):
        yield placement
