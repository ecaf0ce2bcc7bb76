"""Shared fixtures for badge rendering tests."""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import pytest

from colored_string import decode
from player_data import ModeRank, ModeRating, PlayerStatSummary
from renderers import Renderer
from skins import TextPlacement, skin_from_payload
from stat_fetch import StatFetchError

SHADE_COLORS = [[0.0, 1.0, 0.0], [1.0, 1.0, 1.0], [1.0, 0.0, 0.0]]


def make_skin_payload(slots: int = 3, **overrides) -> dict:
    payload = {
        "width": 200,
        "height": 60,
        "background_color": [0.1, 0.1, 0.1],
        "num_game_types": slots,
        "nick": {"size": 16, "x": 4, "y": 16, "max_width": 120},
        "no_stats": {"size": 10, "x": 4, "y": 40},
        "game_type": [{"size": 8, "x": 4 + 40 * i, "y": 28} for i in range(slots)],
        "elo": [{"size": 9, "x": 4 + 40 * i, "y": 38} for i in range(slots)],
        "rank": [{"size": 7, "x": 4 + 40 * i, "y": 48} for i in range(slots)],
        "kd_ratio_label": {"size": 8, "x": 150, "y": 10},
        "kd_ratio": {"size": 10, "x": 150, "y": 22, "color": SHADE_COLORS},
        "kills": {"size": 7, "x": 150, "y": 32},
        "deaths": {"size": 7, "x": 150, "y": 40},
        "win_pct_label": {"size": 8, "x": 180, "y": 10},
        "win_pct": {"size": 10, "x": 180, "y": 22, "color": SHADE_COLORS},
        "wins": {"size": 7, "x": 180, "y": 32},
        "losses": {"size": 7, "x": 180, "y": 40},
        "playing_time": {"size": 7, "x": 4, "y": 58},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def skin_factory(tmp_path):
    def factory(name: str = "basic", slots: int = 3, **overrides):
        return skin_from_payload(name, make_skin_payload(slots, **overrides), tmp_path)

    return factory


@pytest.fixture
def skins_dir(tmp_path):
    directory = tmp_path / "skins"
    directory.mkdir()
    return directory


@pytest.fixture
def write_skin(skins_dir):
    def writer(name: str, payload: dict | None = None, raw: str | None = None) -> Path:
        path = skins_dir / f"{name}.json"
        if raw is None:
            raw = json.dumps(make_skin_payload() if payload is None else payload)
        path.write_text(raw, encoding="utf-8")
        return path

    return writer


def make_summary(
    nick: str = "^1Red^7Player",
    ratings: int = 2,
    ranks: int = 0,
    kills: int = 30,
    deaths: int = 10,
    wins: int = 5,
    losses: int = 5,
) -> PlayerStatSummary:
    modes = ["DUEL", "CTF", "DM"]
    colored = decode(nick)
    return PlayerStatSummary(
        nick=colored,
        stripped_nick=colored.stripped(),
        ratings=[ModeRating(modes[i], 1500 - 100 * i) for i in range(ratings)],
        ranks=[ModeRank(modes[i], 10 + i, 200) for i in range(ranks)],
        kills=kills,
        deaths=deaths,
        wins=wins,
        losses=losses,
        playing_time=timedelta(minutes=1500),
    )


@dataclass
class Placed:
    text: str
    placement: TextPlacement
    colored: bool = False


class RecordingRenderer(Renderer):
    """Keeps every placement instead of drawing it."""

    def __init__(self, canvas=None, cache=None) -> None:
        self.placed: list[Placed] = []

    def place_text(self, text: str, placement: TextPlacement) -> None:
        if placement.enabled and text:
            self.placed.append(Placed(text, placement))

    def place_colored_string(self, value, placement, lightness_floor=0.0, lightness_ceiling=1.0) -> None:
        self.placed.append(Placed(value.stripped(), placement, colored=True))

    def texts(self) -> list[str]:
        return [entry.text for entry in self.placed]

    def text_at(self, placement: TextPlacement) -> list[str]:
        return [entry.text for entry in self.placed if entry.placement == placement]


@pytest.fixture
def recorder():
    return RecordingRenderer()


class FakeStatSource:
    def __init__(self, summaries: dict, failing: set | None = None) -> None:
        self.summaries = summaries
        self.failing = failing or set()
        self.calls: list[int] = []

    def get_player_data(self, player_id: int) -> PlayerStatSummary:
        self.calls.append(player_id)
        if player_id in self.failing:
            raise StatFetchError(f"boom for {player_id}")
        return self.summaries.get(player_id, PlayerStatSummary())
