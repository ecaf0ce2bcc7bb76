#!/usr/bin/env python3
"""Compose one badge: a player's stats drawn onto a skin's base canvas.

Placements on the skin are shared by every worker and never changed;
per-render values such as shaded colors are applied to copies.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable

from PIL import Image

from colored_string import RGBColor
from player_data import PlayerStatSummary
from render_cache import RenderCache
from renderers import PillowRenderer, Renderer
from skins import SkinDefinition, TextPlacement

logger = logging.getLogger(__name__)

NICK_LIGHTNESS_FLOOR = 0.4
NICK_LIGHTNESS_CEILING = 1.0
PRELIMINARY_TEXT = "(preliminary)"
NO_STATS_TEXT = "no stats yet"
KD_RATIO_LABEL = "Kill Ratio"
WIN_PCT_LABEL = "Win Percentage"

RendererFactory = Callable[[Image.Image, RenderCache], Renderer]
Shader = Callable[[float, RGBColor, RGBColor, RGBColor], RGBColor]


def blend(t: float, first: RGBColor, second: RGBColor) -> RGBColor:
    return tuple(t * a + (1 - t) * b for a, b in zip(first, second))  # type: ignore[return-value]


def shade_kd_ratio(ratio: float, high: RGBColor, mid: RGBColor, low: RGBColor) -> RGBColor:
    if ratio >= 1.0:
        return blend(min(ratio - 1.0, 1.0), high, mid)
    return blend(ratio, mid, low)


def shade_win_pct(pct: float, high: RGBColor, mid: RGBColor, low: RGBColor) -> RGBColor:
    if pct > 50.0:
        return blend(2 * (pct / 100 - 0.5), high, mid)
    return blend(2 * (pct / 100), mid, low)


def shaded(placement: TextPlacement, shader: Shader, value: float) -> TextPlacement:
    if len(placement.colors) < 3:
        return placement
    high, mid, low = placement.colors[:3]
    return placement.with_color(shader(value, high, mid, low))


def compose_badge(summary: PlayerStatSummary, skin: SkinDefinition, renderer: Renderer) -> None:
    renderer.place_colored_string(
        summary.nick, skin.nick, NICK_LIGHTNESS_FLOOR, NICK_LIGHTNESS_CEILING
    )

    # Slots are positional: slot i shows the i-th best rated mode.
    ratings = summary.ratings[: skin.slot_count]
    for index, rating in enumerate(ratings):
        renderer.place_text(rating.mode, skin.game_type[index])
        renderer.place_text(f"Elo {rating.rating}", skin.elo[index])
    if not ratings:
        renderer.place_text(NO_STATS_TEXT, skin.no_stats)

    for index, placement in enumerate(skin.rank[: skin.slot_count]):
        if index < len(summary.ranks):
            rank = summary.ranks[index]
            renderer.place_text(f"Rank {rank.rank} of {rank.max_rank}", placement)
        else:
            renderer.place_text(PRELIMINARY_TEXT, placement)

    kd_ratio = summary.kd_ratio()
    renderer.place_text(KD_RATIO_LABEL, skin.kd_ratio_label)
    renderer.place_text(f"{kd_ratio:.3f}", shaded(skin.kd_ratio, shade_kd_ratio, kd_ratio))
    renderer.place_text(f"{summary.kills} kills", skin.kills)
    renderer.place_text(f"{summary.deaths} deaths", skin.deaths)

    win_pct = summary.win_pct()
    renderer.place_text(WIN_PCT_LABEL, skin.win_pct_label)
    renderer.place_text(f"{win_pct:.2f}%", shaded(skin.win_pct, shade_win_pct, win_pct))
    renderer.place_text(f"{summary.wins} wins", skin.wins)
    renderer.place_text(f"{summary.losses} losses", skin.losses)

    renderer.place_text(f"Playing Time: {summary.playing_time_string()}", skin.playing_time)


def render_badge(
    summary: PlayerStatSummary,
    skin: SkinDefinition,
    cache: RenderCache,
    renderer_factory: RendererFactory = PillowRenderer,
) -> Image.Image:
    canvas = cache.base_canvas(skin).copy()
    compose_badge(summary, skin, renderer_factory(canvas, cache))
    return canvas


def render_badge_bytes(
    summary: PlayerStatSummary,
    skin: SkinDefinition,
    cache: RenderCache,
    image_format: str = "PNG",
) -> bytes:
    image = render_badge(summary, skin, cache)
    if image_format.upper() in ("JPEG", "JPG"):
        image_format = "JPEG"
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def save_badge(image: Image.Image, path: Path, jpeg_quality: int = 0) -> Path:
    """Write ``image`` as PNG, optionally transcoding it to JPEG.

    With a JPEG quality set the PNG is only an intermediate and is removed
    once the JPEG exists.
    """
    image.save(path, format="PNG")
    if jpeg_quality <= 0:
        return path

    jpeg_path = path.with_suffix(".jpg")
    with Image.open(path) as written:
        written.convert("RGB").save(jpeg_path, format="JPEG", quality=jpeg_quality)
    try:
        path.unlink()
    except OSError as exc:
        logger.warning("failed to remove %s: %s", path, exc)
    return jpeg_path
