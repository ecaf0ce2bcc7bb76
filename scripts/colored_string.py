#!/usr/bin/env python3
"""Color-coded nickname strings.

Nicknames carry inline color escapes: a marker character followed by a
palette digit (``^1``) or a 12-bit hex color (``^xF80``). Decoding splits
the raw string into colored segments; the stripped form drops every
escape and is what gets measured and sorted on.
"""
from __future__ import annotations

import colorsys
import re
from dataclasses import dataclass, field

RGBColor = tuple[float, float, float]

WHITE: RGBColor = (1.0, 1.0, 1.0)
HEX_COLOR_RE = re.compile(r"[0-9a-fA-F]{3}")

XONOTIC_PALETTE: dict[str, RGBColor] = {
    "0": (0.0, 0.0, 0.0),
    "1": (1.0, 0.0, 0.0),
    "2": (0.0, 1.0, 0.0),
    "3": (1.0, 1.0, 0.0),
    "4": (0.0, 0.0, 1.0),
    "5": (0.0, 1.0, 1.0),
    "6": (1.0, 0.0, 1.0),
    "7": (1.0, 1.0, 1.0),
    "8": (0.5, 0.5, 0.5),
    "9": (0.5, 0.5, 0.5),
}

# Glyphs 0x00-0x1f and 0x80-0x9f of the game font, as printable stand-ins.
_LOW_GLYPHS = "#####.###### #..[]0123456789.<=>"
_HIGH_GLYPHS = "<=>##.#### # >..[]0123456789.<=>"
GLYPH_BASE = 0xE000


def _build_glyph_table() -> dict[int, str]:
    table: dict[int, str] = {}
    for index in range(256):
        low = index & 0x7F
        if low < 32:
            source = _HIGH_GLYPHS if index & 0x80 else _LOW_GLYPHS
            replacement = source[low]
        elif low == 127:
            replacement = "<"
        else:
            replacement = chr(low)
        table[GLYPH_BASE + index] = replacement
    return table


@dataclass(frozen=True)
class ColorScheme:
    marker: str
    palette: dict[str, RGBColor]
    default_color: RGBColor = WHITE
    hex_selector: str = "x"
    glyphs: dict[int, str] = field(default_factory=dict)


XONOTIC = ColorScheme(marker="^", palette=XONOTIC_PALETTE, glyphs=_build_glyph_table())


@dataclass(frozen=True)
class ColorSegment:
    text: str
    color: RGBColor


class ColoredString:
    def __init__(self, segments: list[ColorSegment] | None = None) -> None:
        if not segments:
            segments = [ColorSegment("", WHITE)]
        self._segments = tuple(segments)
        self._stripped = "".join(segment.text for segment in self._segments)

    @classmethod
    def plain(cls, text: str, color: RGBColor = WHITE) -> "ColoredString":
        return cls([ColorSegment(text, color)])

    def stripped(self) -> str:
        return self._stripped

    def color_parts(self) -> tuple[ColorSegment, ...]:
        return self._segments

    def __str__(self) -> str:
        return self._stripped

    def __repr__(self) -> str:
        return f"ColoredString({list(self._segments)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColoredString):
            return NotImplemented
        return self._segments == other._segments


def parse_hex_color(token: str) -> RGBColor:
    return tuple(int(digit, 16) / 15.0 for digit in token)  # type: ignore[return-value]


def decode_glyphs(raw: str, scheme: ColorScheme = XONOTIC) -> str:
    if not scheme.glyphs:
        return raw
    return raw.translate(scheme.glyphs)


def decode(raw: str, scheme: ColorScheme = XONOTIC) -> ColoredString:
    """Split ``raw`` into colored segments.

    Escapes that are unknown or cut off by the end of the string are kept
    as literal text; a doubled marker yields one literal marker.
    """
    text = decode_glyphs(raw or "", scheme)
    marker = scheme.marker
    segments: list[ColorSegment] = []
    buffer: list[str] = []
    color = scheme.default_color
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if char != marker:
            buffer.append(char)
            index += 1
            continue

        selector = text[index + 1] if index + 1 < length else ""
        if selector == marker:
            buffer.append(marker)
            index += 2
            continue

        hex_token = text[index + 2 : index + 5]
        if selector in scheme.palette:
            next_color = scheme.palette[selector]
            width = 2
        elif selector == scheme.hex_selector and HEX_COLOR_RE.fullmatch(hex_token):
            next_color = parse_hex_color(hex_token)
            width = 5
        else:
            buffer.append(char)
            index += 1
            continue

        if buffer:
            segments.append(ColorSegment("".join(buffer), color))
            buffer = []
        color = next_color
        index += width

    if buffer or not segments:
        segments.append(ColorSegment("".join(buffer), color))
    return ColoredString(segments)


def cap_lightness(color: RGBColor, floor: float, ceiling: float) -> RGBColor:
    hue, lightness, saturation = colorsys.rgb_to_hls(*color)
    if saturation == 0:
        return color
    capped = min(max(lightness, floor), ceiling)
    if capped == lightness:
        return color
    return colorsys.hls_to_rgb(hue, capped, saturation)


def to_rgb255(color: RGBColor) -> tuple[int, int, int]:
    return tuple(max(0, min(255, int(round(channel * 255)))) for channel in color)  # type: ignore[return-value]
