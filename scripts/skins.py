#!/usr/bin/env python3
"""Skin definitions: canvas size, background art and text placements.

One JSON document per skin; the file's base name is the skin name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from _shared import (
    float_or_default,
    int_or_default,
    load_json_file,
    project_root,
    resolve_path,
)
from colored_string import WHITE, RGBColor

logger = logging.getLogger(__name__)

ALIGNMENTS = ("left", "center", "right")
SLOT_KEYS = ("game_type", "elo", "rank")
SINGLE_KEYS = (
    "nick",
    "win_pct_label",
    "win_pct",
    "wins",
    "losses",
    "kd_ratio_label",
    "kd_ratio",
    "kills",
    "deaths",
    "playing_time",
    "no_stats",
)


@dataclass(frozen=True)
class TextPlacement:
    font: str = ""
    size: float = 0.0
    x: float = 0.0
    y: float = 0.0
    colors: tuple[RGBColor, ...] = (WHITE,)
    angle: int = 0
    align: str = "left"
    max_width: int = 0
    width: int = 0
    height: int = 0

    @property
    def enabled(self) -> bool:
        return self.size > 0

    @property
    def color(self) -> RGBColor:
        return self.colors[0] if self.colors else WHITE

    def with_color(self, color: RGBColor) -> "TextPlacement":
        return replace(self, colors=(color, *self.colors[1:]))

    def with_size(self, size: float) -> "TextPlacement":
        return replace(self, size=size)


@dataclass(frozen=True)
class SkinDefinition:
    name: str
    width: int
    height: int
    background: Path | None = None
    background_color: RGBColor | None = None
    overlay: Path | None = None
    font: str = ""
    num_game_types: int = 0
    nick: TextPlacement = field(default_factory=TextPlacement)
    game_type: tuple[TextPlacement, ...] = ()
    elo: tuple[TextPlacement, ...] = ()
    rank: tuple[TextPlacement, ...] = ()
    win_pct_label: TextPlacement = field(default_factory=TextPlacement)
    win_pct: TextPlacement = field(default_factory=TextPlacement)
    wins: TextPlacement = field(default_factory=TextPlacement)
    losses: TextPlacement = field(default_factory=TextPlacement)
    kd_ratio_label: TextPlacement = field(default_factory=TextPlacement)
    kd_ratio: TextPlacement = field(default_factory=TextPlacement)
    kills: TextPlacement = field(default_factory=TextPlacement)
    deaths: TextPlacement = field(default_factory=TextPlacement)
    playing_time: TextPlacement = field(default_factory=TextPlacement)
    no_stats: TextPlacement = field(default_factory=TextPlacement)

    @property
    def slot_count(self) -> int:
        slots = min(len(self.game_type), len(self.elo))
        if self.num_game_types > 0:
            slots = min(slots, self.num_game_types)
        return slots

    def __str__(self) -> str:
        return self.name


def parse_color(value: object) -> RGBColor:
    if isinstance(value, str):
        token = value.strip().lstrip("#")
        if len(token) != 6:
            raise ValueError(f"invalid color string: {value!r}")
        return tuple(int(token[i : i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]
    if isinstance(value, dict):
        value = [value.get("r"), value.get("g"), value.get("b")]
    if isinstance(value, (list, tuple)) and len(value) == 3:
        channels = tuple(float(channel) for channel in value)
        if any(channel < 0 or channel > 1 for channel in channels):
            raise ValueError(f"color channels must be between 0 and 1: {value!r}")
        return channels  # type: ignore[return-value]
    raise ValueError(f"invalid color: {value!r}")


def parse_colors(value: object) -> tuple[RGBColor, ...]:
    if value is None:
        return (WHITE,)
    if isinstance(value, list) and value and isinstance(value[0], (list, tuple, str, dict)):
        return tuple(parse_color(entry) for entry in value)
    return (parse_color(value),)


def resolve_font(root: Path, value: str | None, default: str) -> str:
    if not value:
        return default
    path = resolve_path(root, value)
    if path is not None and path.is_file():
        return str(path)
    # Not a file on disk: leave it to Pillow's font lookup by name.
    return value


def parse_placement(root: Path, block: dict | None, default_font: str, name: str) -> TextPlacement:
    if block is None:
        return TextPlacement()
    if not isinstance(block, dict):
        raise ValueError(f"{name} placement must be an object")

    align = str(block.get("align") or "left").lower()
    if align not in ALIGNMENTS:
        raise ValueError(f"{name} align must be one of {', '.join(ALIGNMENTS)}")

    return TextPlacement(
        font=resolve_font(root, block.get("font"), default_font),
        size=float_or_default(block.get("size"), 0.0),
        x=float_or_default(block.get("x"), 0.0),
        y=float_or_default(block.get("y"), 0.0),
        colors=parse_colors(block.get("color")),
        angle=int_or_default(block.get("angle"), 0),
        align=align,
        max_width=int_or_default(block.get("max_width"), 0),
        width=int_or_default(block.get("width"), 0),
        height=int_or_default(block.get("height"), 0),
    )


def parse_slots(root: Path, value: object, default_font: str, name: str) -> tuple[TextPlacement, ...]:
    if value is None:
        return ()
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"{name} must be a list of placements")
    return tuple(
        parse_placement(root, block, default_font, f"{name}[{index}]")
        for index, block in enumerate(value)
    )


def skin_from_payload(name: str, payload: dict, root: Path) -> SkinDefinition:
    width = int_or_default(payload.get("width"), 0)
    height = int_or_default(payload.get("height"), 0)
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive integers")

    font = resolve_font(root, payload.get("font"), "")
    background_color = payload.get("background_color")
    placements: dict[str, object] = {}
    for key in SINGLE_KEYS:
        placements[key] = parse_placement(root, payload.get(key), font, key)
    for key in SLOT_KEYS:
        placements[key] = parse_slots(root, payload.get(key), font, key)

    return SkinDefinition(
        name=name,
        width=width,
        height=height,
        background=resolve_path(root, payload.get("background")),
        background_color=parse_color(background_color) if background_color is not None else None,
        overlay=resolve_path(root, payload.get("overlay")),
        font=font,
        num_game_types=int_or_default(payload.get("num_game_types"), 0),
        **placements,
    )


def load_skin(path: Path, root: Path | None = None) -> SkinDefinition:
    root = project_root() if root is None else root
    payload = load_json_file(path)
    # "skins/default.json" -> "default"
    name = path.name.split(".json", 1)[0]
    try:
        return skin_from_payload(name, payload, root)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"invalid skin {path}: {exc}") from exc


def load_skins(directory: Path, root: Path | None = None) -> dict[str, SkinDefinition]:
    if not directory.is_dir():
        raise RuntimeError(f"skins directory not found: {directory}")

    skins: dict[str, SkinDefinition] = {}
    for path in sorted(directory.glob("*.json")):
        try:
            skin = load_skin(path, root)
        except (OSError, RuntimeError) as exc:
            logger.warning("skipping skin %s: %s", path.name, exc)
            continue
        skins[skin.name] = skin
    logger.info("loaded %d skin(s) from %s", len(skins), directory)
    return skins
