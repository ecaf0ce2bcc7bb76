#!/usr/bin/env python3
"""Render one badge per (player, skin) across a fixed pool of worker threads.

Player IDs go onto a shared queue followed by one close marker per
worker. A worker exits when it takes a close marker, so every ID queued
before the markers is handled exactly once.
"""
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from badge_renderer import RendererFactory, render_badge, save_badge
from render_cache import RenderCache
from renderers import PillowRenderer
from skins import SkinDefinition
from stat_fetch import StatFetchError, StatSource

logger = logging.getLogger(__name__)

_CLOSED = object()


def output_path(output_root: Path, skin_name: str, player_id: int, ext: str = "png") -> Path:
    return output_root / skin_name / f"{player_id}.{ext}"


@dataclass
class BatchReport:
    rendered: int = 0
    skipped_players: int = 0
    failed: int = 0
    outputs: list[Path] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_output(self, path: Path) -> None:
        with self._lock:
            self.rendered += 1
            self.outputs.append(path)

    def record_skip(self) -> None:
        with self._lock:
            self.skipped_players += 1

    def record_failure(self) -> None:
        with self._lock:
            self.failed += 1


class BadgeDispatcher:
    def __init__(
        self,
        fetcher: StatSource,
        skins: Mapping[str, SkinDefinition],
        output_root: Path,
        workers: int = 4,
        cache: RenderCache | None = None,
        jpeg_quality: int = 0,
        renderer_factory: RendererFactory = PillowRenderer,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.fetcher = fetcher
        self.skins = dict(skins)
        self.output_root = output_root
        self.workers = workers
        self.cache = cache if cache is not None else RenderCache()
        self.jpeg_quality = jpeg_quality
        self.renderer_factory = renderer_factory

    def run(self, player_ids: Iterable[int]) -> BatchReport:
        report = BatchReport()
        for name in self.skins:
            (self.output_root / name).mkdir(parents=True, exist_ok=True)
        self.cache.warm(self.skins.values())

        work: queue.Queue = queue.Queue()
        threads = [
            threading.Thread(
                target=self._worker,
                args=(work, report),
                name=f"badge-worker-{index}",
                daemon=True,
            )
            for index in range(self.workers)
        ]
        for thread in threads:
            thread.start()

        queued = 0
        for player_id in player_ids:
            work.put(player_id)
            queued += 1
        for _ in threads:
            work.put(_CLOSED)
        logger.info("queued %d player(s) for %d worker(s)", queued, self.workers)

        for thread in threads:
            thread.join()
        logger.info(
            "rendered %d badge(s), skipped %d player(s), %d failure(s)",
            report.rendered,
            report.skipped_players,
            report.failed,
        )
        return report

    def _worker(self, work: queue.Queue, report: BatchReport) -> None:
        while True:
            player_id = work.get()
            if player_id is _CLOSED:
                return
            try:
                self.render_player(player_id, report)
            except Exception:
                logger.exception("unexpected failure rendering player %s", player_id)
                report.record_failure()

    def render_player(self, player_id: int, report: BatchReport) -> None:
        try:
            summary = self.fetcher.get_player_data(player_id)
        except StatFetchError as exc:
            logger.warning("skipping player %s: %s", player_id, exc)
            report.record_skip()
            return

        if summary is None or summary.is_empty():
            logger.info("no stats for player %s, skipping", player_id)
            report.record_skip()
            return

        for skin in self.skins.values():
            path = output_path(self.output_root, skin.name, player_id)
            try:
                image = render_badge(summary, skin, self.cache, self.renderer_factory)
                written = save_badge(image, path, self.jpeg_quality)
            except (OSError, RuntimeError) as exc:
                logger.warning("player %s skin %s failed: %s", player_id, skin.name, exc)
                report.record_failure()
                continue
            logger.debug("wrote %s", written)
            report.record_output(written)
