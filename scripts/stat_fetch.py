#!/usr/bin/env python3
"""Player statistics from the stats database."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Mapping, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from colored_string import decode
from player_data import ModeRank, ModeRating, PlayerStatSummary

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "postgresql+psycopg2://xonstat@localhost/xonstatdb"
MAX_GAME_TYPES = 3
# Game types scored on time alone; they have no winners or losers.
NO_WIN_LOSS_GAME_TYPES = frozenset({"CTS"})

FIND_PLAYERS_SQL = """
SELECT DISTINCT p.player_id
FROM players p
JOIN player_game_stats pgs ON p.player_id = pgs.player_id
JOIN player_elos pe ON p.player_id = pe.player_id
WHERE p.active_ind = true
AND p.player_id > 2
AND p.nick IS NOT NULL
"""

PLAYER_DATA_SQL = text(
    """
SELECT
    p.nick,
    p.stripped_nick,
    UPPER(agg_stats.game_type_cd) AS game_type_cd,
    ROUND(pe.elo) AS elo,
    pr.rank,
    pr.max_rank,
    COALESCE(SUM(agg_stats.win), 0) AS wins,
    COALESCE(SUM(agg_stats.loss), 0) AS losses,
    COALESCE(SUM(agg_stats.kills), 0) AS kills,
    COALESCE(SUM(agg_stats.deaths), 0) AS deaths,
    ROUND(SUM(agg_stats.alivetime) / 60) AS alivetime
FROM (
    SELECT
        pgs.player_id,
        g.game_id,
        g.game_type_cd,
        CASE
            WHEN g.winner = pgs.team THEN 1
            WHEN pgs.scoreboardpos = 1 THEN 1
            ELSE 0
        END AS win,
        CASE
            WHEN g.winner = pgs.team THEN 0
            WHEN pgs.scoreboardpos = 1 THEN 0
            ELSE 1
        END AS loss,
        pgs.kills,
        pgs.deaths,
        EXTRACT(EPOCH FROM pgs.alivetime) AS alivetime
    FROM games g
    JOIN player_game_stats pgs ON g.game_id = pgs.game_id
    WHERE pgs.player_id = :player_id
    AND g.players @> ARRAY[CAST(:player_id AS integer)]
) agg_stats
JOIN players p ON p.player_id = agg_stats.player_id
JOIN player_elos pe
    ON agg_stats.game_type_cd = pe.game_type_cd
    AND pe.player_id = agg_stats.player_id
LEFT OUTER JOIN (
    SELECT pr.game_type_cd, pr.rank, overall.max_rank
    FROM player_ranks pr
    JOIN (
        SELECT game_type_cd, MAX(rank) AS max_rank
        FROM player_ranks
        GROUP BY game_type_cd
    ) overall ON pr.game_type_cd = overall.game_type_cd
    WHERE overall.max_rank > 1
    AND pr.player_id = :player_id
) pr ON pr.game_type_cd = pe.game_type_cd
GROUP BY p.nick, p.stripped_nick, agg_stats.game_type_cd, pe.elo, pr.rank, pr.max_rank
ORDER BY pe.elo DESC NULLS LAST
LIMIT :max_game_types
"""
)


class StatFetchError(RuntimeError):
    pass


class StatSource(Protocol):
    def get_player_data(self, player_id: int) -> PlayerStatSummary:
        ...


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://") :]
    return url


def _as_int(value: object) -> int:
    return int(value) if value is not None else 0


def summarize_rows(rows: Iterable[Mapping]) -> PlayerStatSummary:
    """Fold per-game-type rows (best Elo first) into one summary.

    No rows gives a summary with an empty nick. Elo and rank come from
    outer joins and may be NULL; those rows still count toward the totals.
    """
    summary = PlayerStatSummary()
    filled = False
    alive_minutes = 0

    for row in rows:
        if not filled:
            summary.nick = decode(row["nick"] or "")
            summary.stripped_nick = row["stripped_nick"] or summary.nick.stripped()
            filled = True

        game_type = str(row["game_type_cd"] or "")
        if row["elo"] is not None:
            summary.ratings.append(ModeRating(game_type, int(row["elo"])))
        if row["rank"] is not None and row["max_rank"] is not None:
            summary.ranks.append(ModeRank(game_type, int(row["rank"]), int(row["max_rank"])))

        if game_type not in NO_WIN_LOSS_GAME_TYPES:
            summary.wins += _as_int(row["wins"])
            summary.losses += _as_int(row["losses"])
        summary.kills += _as_int(row["kills"])
        summary.deaths += _as_int(row["deaths"])
        alive_minutes += _as_int(row["alivetime"])

    summary.playing_time = timedelta(minutes=alive_minutes)
    return summary


class StatFetcher:
    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        engine: Engine | None = None,
        pool_size: int = 5,
    ) -> None:
        if engine is None:
            engine = create_engine(
                normalize_database_url(database_url),
                pool_size=pool_size,
                pool_pre_ping=True,
            )
        self.engine = engine

    def find_players(self, delta_hours: int = 0, limit: int = 0) -> list[int]:
        sql = FIND_PLAYERS_SQL
        params: dict[str, int] = {}
        # constrain the time window and result count only when asked to
        if delta_hours > 0:
            sql += "AND pgs.create_dt > now() - make_interval(hours => :delta_hours)\n"
            params["delta_hours"] = delta_hours
        if limit > 0:
            sql += "LIMIT :limit\n"
            params["limit"] = limit

        try:
            with self.engine.connect() as connection:
                player_ids = connection.execute(text(sql), params).scalars().all()
        except SQLAlchemyError as exc:
            raise StatFetchError(f"unable to find players: {exc}") from exc
        logger.info("found %d player(s)", len(player_ids))
        return [int(player_id) for player_id in player_ids]

    def get_player_data(self, player_id: int) -> PlayerStatSummary:
        params = {"player_id": player_id, "max_game_types": MAX_GAME_TYPES}
        try:
            with self.engine.connect() as connection:
                rows = connection.execute(PLAYER_DATA_SQL, params).mappings().all()
        except SQLAlchemyError as exc:
            raise StatFetchError(f"unable to fetch player {player_id}: {exc}") from exc
        return summarize_rows(rows)

    def close(self) -> None:
        self.engine.dispose()
