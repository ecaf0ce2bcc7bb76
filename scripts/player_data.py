#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from colored_string import ColoredString

MINUTES_PER_DAY = 1440
MINUTES_PER_HOUR = 60


@dataclass(frozen=True)
class ModeRating:
    mode: str
    rating: int


@dataclass(frozen=True)
class ModeRank:
    mode: str
    rank: int
    max_rank: int


@dataclass
class PlayerStatSummary:
    nick: ColoredString = field(default_factory=ColoredString)
    stripped_nick: str = ""
    ratings: list[ModeRating] = field(default_factory=list)
    ranks: list[ModeRank] = field(default_factory=list)
    kills: int = 0
    deaths: int = 0
    wins: int = 0
    losses: int = 0
    playing_time: timedelta = field(default_factory=timedelta)

    def is_empty(self) -> bool:
        return not self.nick.stripped() and not self.stripped_nick

    def kd_ratio(self) -> float:
        if self.deaths > 0:
            return self.kills / self.deaths
        return 0.0

    def win_pct(self) -> float:
        total_games = self.wins + self.losses
        if total_games > 0:
            return self.wins / total_games * 100
        return 0.0

    def playing_time_string(self) -> str:
        return duration_string(self.playing_time)


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def duration_string(duration: timedelta) -> str:
    minutes = max(0, int(duration.total_seconds() // 60))
    days, minutes = divmod(minutes, MINUTES_PER_DAY)
    hours, minutes = divmod(minutes, MINUTES_PER_HOUR)

    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hr"))
    if minutes:
        parts.append(_plural(minutes, "min"))
    return ", ".join(parts)
