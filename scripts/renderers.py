#!/usr/bin/env python3
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from PIL import Image, ImageDraw

from colored_string import ColoredString, cap_lightness, to_rgb255
from render_cache import RenderCache
from skins import TextPlacement

logger = logging.getLogger(__name__)

SHRINK_STEP = 2
BASELINE_ANCHORS = {"left": "ls", "center": "ms", "right": "rs"}
ALIGN_FACTORS = {"left": 0.0, "center": 0.5, "right": 1.0}


def fit_font_size(
    measure: Callable[[float], float],
    size: float,
    max_width: float,
    step: float = SHRINK_STEP,
) -> float:
    """Shrink ``size`` by ``step`` until ``measure(size)`` fits ``max_width``.

    A non-positive ``max_width`` means no limit. The result is either a size
    that fits or a non-positive size, which callers treat as "nothing fits".
    """
    if max_width <= 0:
        return size
    while size > 0 and measure(size) > max_width:
        size -= step
    return size


def anchor_x(placement: TextPlacement) -> float:
    # A fixed width turns x into the left edge of a slot box.
    if placement.width > 0:
        return placement.x + placement.width * ALIGN_FACTORS.get(placement.align, 0.0)
    return placement.x


class Renderer(ABC):
    @abstractmethod
    def place_text(self, text: str, placement: TextPlacement) -> None:
        ...

    @abstractmethod
    def place_colored_string(
        self,
        value: ColoredString,
        placement: TextPlacement,
        lightness_floor: float = 0.0,
        lightness_ceiling: float = 1.0,
    ) -> None:
        ...


class PillowRenderer(Renderer):
    def __init__(self, canvas: Image.Image, cache: RenderCache) -> None:
        self.canvas = canvas
        self.cache = cache
        self.draw = ImageDraw.Draw(canvas)

    def text_width(self, text: str, font_name: str, size: float) -> float:
        return self.draw.textlength(text, font=self.cache.font(font_name, size))

    def place_text(self, text: str, placement: TextPlacement) -> None:
        if not placement.enabled or not text:
            return
        font = self.cache.font(placement.font, placement.size)
        position = (anchor_x(placement), placement.y)
        anchor = BASELINE_ANCHORS.get(placement.align, "ls")
        fill = to_rgb255(placement.color)

        if placement.angle:
            self._place_rotated(text, position, anchor, font, fill, placement.angle)
            return
        self.draw.text(position, text, font=font, fill=fill, anchor=anchor)

    def _place_rotated(self, text, position, anchor, font, fill, angle: int) -> None:
        layer = Image.new("RGBA", self.canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).text(position, text, font=font, fill=fill, anchor=anchor)
        self._composite_rotated(layer, position, angle)

    def place_colored_string(
        self,
        value: ColoredString,
        placement: TextPlacement,
        lightness_floor: float = 0.0,
        lightness_ceiling: float = 1.0,
    ) -> None:
        if not placement.enabled:
            return
        stripped = value.stripped()
        if not stripped:
            return

        size = fit_font_size(
            lambda candidate: self.text_width(stripped, placement.font, candidate),
            placement.size,
            placement.max_width,
        )
        if size <= 0:
            logger.warning("%r does not fit in %dpx at any size", stripped, placement.max_width)
            return

        font = self.cache.font(placement.font, size)
        total_width = self.draw.textlength(stripped, font=font)
        origin = (anchor_x(placement), placement.y)
        x = origin[0] - total_width * ALIGN_FACTORS.get(placement.align, 0.0)

        target = self.canvas
        if placement.angle:
            target = Image.new("RGBA", self.canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(target)
        for part in value.color_parts():
            color = part.color
            if lightness_floor > 0 or lightness_ceiling < 1:
                color = cap_lightness(color, lightness_floor, lightness_ceiling)
            draw.text((x, placement.y), part.text, font=font, fill=to_rgb255(color), anchor="ls")
            # the next part starts where this one ends
            x += draw.textlength(part.text, font=font)

        if placement.angle:
            self._composite_rotated(target, origin, placement.angle)

    def _composite_rotated(self, layer: Image.Image, center, angle: int) -> None:
        # Pillow rotates counter-clockwise; skin angles are clockwise degrees.
        layer = layer.rotate(-angle, resample=Image.BICUBIC, center=center)
        self.canvas.alpha_composite(layer)
