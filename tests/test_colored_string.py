"""Tests for color-coded nickname decoding."""
import pytest

from colored_string import (
    WHITE,
    XONOTIC_PALETTE,
    ColoredString,
    ColorSegment,
    cap_lightness,
    decode,
    decode_glyphs,
    to_rgb255,
)


def test_plain_string_is_one_segment():
    value = decode("PlainNick")
    assert value.color_parts() == (ColorSegment("PlainNick", WHITE),)
    assert value.stripped() == "PlainNick"


def test_empty_string_yields_one_empty_segment():
    value = decode("")
    assert value.color_parts() == (ColorSegment("", WHITE),)
    assert value.stripped() == ""


def test_palette_escapes_split_segments():
    value = decode("^1Red^2Green")
    assert value.color_parts() == (
        ColorSegment("Red", XONOTIC_PALETTE["1"]),
        ColorSegment("Green", XONOTIC_PALETTE["2"]),
    )
    assert value.stripped() == "RedGreen"


def test_text_before_first_escape_is_white():
    value = decode("pre^4post")
    assert value.color_parts()[0] == ColorSegment("pre", WHITE)
    assert value.color_parts()[1] == ColorSegment("post", XONOTIC_PALETTE["4"])


def test_hex_escape():
    value = decode("^xF80orange")
    (segment,) = value.color_parts()
    assert segment.text == "orange"
    assert segment.color == pytest.approx((1.0, 8 / 15, 0.0))


def test_consecutive_escapes_do_not_create_empty_segments():
    value = decode("^1^2Green")
    assert value.color_parts() == (ColorSegment("Green", XONOTIC_PALETTE["2"]),)


@pytest.mark.parametrize(
    "raw, stripped",
    [
        ("abc^", "abc^"),
        ("abc^x1", "abc^x1"),
        ("^zed", "^zed"),
        ("^xGGGnick", "^xGGGnick"),
    ],
)
def test_unknown_or_truncated_escapes_are_literal(raw, stripped):
    value = decode(raw)
    assert value.stripped() == stripped
    assert len(value.color_parts()) == 1


def test_doubled_marker_is_a_literal_caret():
    assert decode("a^^1b").stripped() == "a^1b"


@pytest.mark.parametrize(
    "raw",
    ["^1a^2b^3c", "^x0F0green^7white", "no escapes", "^9", "x^5y^xABCz", ""],
)
def test_stripped_drops_escapes_and_never_grows(raw):
    stripped = decode(raw).stripped()
    assert len(stripped) <= len(raw)
    for digit in XONOTIC_PALETTE:
        assert f"^{digit}" not in stripped
    assert "".join(part.text for part in decode(raw).color_parts()) == stripped


def test_game_font_glyphs_are_decoded():
    assert decode_glyphs("\ue041bc") == "Abc"
    assert decode_glyphs("\ue0c1") == "A"
    assert decode_glyphs("\ue012\ue013") == "01"
    assert decode("^1\ue041").stripped() == "A"


def test_colored_string_defaults_to_single_empty_segment():
    assert ColoredString().color_parts() == (ColorSegment("", WHITE),)
    assert str(ColoredString.plain("hi")) == "hi"


def test_cap_lightness_leaves_grey_alone():
    grey = (0.1, 0.1, 0.1)
    assert cap_lightness(grey, 0.4, 1.0) == grey


def test_cap_lightness_raises_dark_colors_keeping_hue():
    assert cap_lightness((0.0, 0.0, 0.2), 0.4, 1.0) == pytest.approx((0.0, 0.0, 0.8))


def test_cap_lightness_lowers_light_colors():
    capped = cap_lightness((1.0, 0.9, 0.9), 0.0, 0.8)
    high, low = max(capped), min(capped)
    assert (high + low) / 2 == pytest.approx(0.8)
    assert capped[1] == pytest.approx(capped[2])


def test_cap_lightness_within_band_is_unchanged():
    assert cap_lightness((1.0, 0.0, 0.0), 0.4, 1.0) == (1.0, 0.0, 0.0)


def test_to_rgb255_clamps():
    assert to_rgb255((1.0, 0.5, 0.0)) == (255, 128, 0)
    assert to_rgb255((1.2, -0.1, 0.0)) == (255, 0, 0)
