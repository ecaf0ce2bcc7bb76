"""Tests for skin definition parsing and loading."""
import dataclasses
from pathlib import Path

import pytest

from _shared import project_root
from colored_string import WHITE
from conftest import make_skin_payload
from skins import TextPlacement, load_skin, load_skins, parse_color, parse_colors


def test_load_skins_names_skins_after_files(write_skin, skins_dir):
    write_skin("default")
    write_skin("compact", make_skin_payload(slots=2))

    skins = load_skins(skins_dir)

    assert sorted(skins) == ["compact", "default"]
    assert skins["default"].name == "default"
    assert skins["compact"].slot_count == 2


def test_malformed_skins_are_skipped(write_skin, skins_dir):
    write_skin("good")
    write_skin("broken", raw="{not json")
    write_skin("list", raw="[1, 2, 3]")
    write_skin("sizeless", make_skin_payload(width=0))
    write_skin("badalign", make_skin_payload(nick={"size": 10, "align": "justify"}))

    skins = load_skins(skins_dir)

    assert list(skins) == ["good"]


def test_undecodable_skin_file_is_skipped(write_skin, skins_dir):
    write_skin("good")
    (skins_dir / "latin1.json").write_bytes(b'{"width": 10, "height": 10, "nick": {"x": "\xe9"}}')

    skins = load_skins(skins_dir)

    assert list(skins) == ["good"]


def test_missing_skins_directory_is_fatal(tmp_path):
    with pytest.raises(RuntimeError, match="skins directory not found"):
        load_skins(tmp_path / "nope")


def test_load_skin_parses_placements(write_skin, tmp_path):
    path = write_skin("default")
    skin = load_skin(path, tmp_path)

    assert (skin.width, skin.height) == (200, 60)
    assert skin.background is None
    assert skin.background_color == pytest.approx((0.1, 0.1, 0.1))
    assert skin.nick.max_width == 120
    assert len(skin.rank) == 3
    assert skin.rank[2].x == 84
    assert len(skin.kd_ratio.colors) == 3
    assert skin.kills.colors == (WHITE,)
    assert not skin.no_stats.angle


def test_relative_asset_paths_resolve_against_root(write_skin, tmp_path):
    path = write_skin("art", make_skin_payload(background="art/bg.png", overlay="/abs/overlay.png"))
    skin = load_skin(path, tmp_path)

    assert skin.background == tmp_path / "art" / "bg.png"
    assert skin.overlay == Path("/abs/overlay.png")


def test_placements_inherit_the_skin_font(write_skin, tmp_path):
    font_file = tmp_path / "fonts" / "badge.ttf"
    font_file.parent.mkdir()
    font_file.write_bytes(b"")
    payload = make_skin_payload(font="fonts/badge.ttf")
    payload["kills"] = {"size": 7, "font": "DejaVuSans.ttf"}

    skin = load_skin(write_skin("fonts", payload), tmp_path)

    assert skin.font == str(font_file)
    assert skin.nick.font == str(font_file)
    assert skin.kills.font == "DejaVuSans.ttf"


def test_num_game_types_bounds_slot_count(skin_factory):
    assert skin_factory(slots=3).slot_count == 3
    assert skin_factory(slots=3, num_game_types=1).slot_count == 1


def test_parse_color_forms():
    assert parse_color("#ff0000") == (1.0, 0.0, 0.0)
    assert parse_color([0, 0.5, 1]) == (0.0, 0.5, 1.0)
    assert parse_color({"r": 1, "g": 1, "b": 0}) == (1.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        parse_color([0, 2, 0])
    with pytest.raises(ValueError):
        parse_color("red")


def test_parse_colors_single_and_list():
    assert parse_colors(None) == (WHITE,)
    assert parse_colors([1, 1, 1]) == (WHITE,)
    assert parse_colors(["#00ff00", "#ffffff", "#ff0000"])[2] == (1.0, 0.0, 0.0)


def test_placements_are_immutable_templates():
    placement = TextPlacement(size=10, colors=((1.0, 0.0, 0.0), WHITE, (0.0, 0.0, 1.0)))
    shaded = placement.with_color((0.5, 0.5, 0.5))

    assert placement.color == (1.0, 0.0, 0.0)
    assert shaded.colors[1:] == placement.colors[1:]
    with pytest.raises(dataclasses.FrozenInstanceError):
        placement.size = 4


def test_shipped_skins_load():
    skins = load_skins(project_root() / "skins")
    assert {"default", "vertical"} <= set(skins)
    assert skins["default"].slot_count == 3
