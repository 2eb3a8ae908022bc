"""Pyramid generation: resample every level and fan tiles out to the sink."""

from __future__ import annotations

import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from zoomtiler.core.errors import ConfigurationError, InvalidLevelError
from zoomtiler.core.models import LevelReport, PyramidReport, SourceRaster, TileResult, TilingConfig
from zoomtiler.logging import get_logger
from zoomtiler.resampling import resize, resolve_kernel

from .base import TileSink
from .partition import check_level_raster, partition_row
from .sink import FileTileSink

LOGGER = get_logger(__name__)


def level_side(level: int) -> int:
    """Number of tiles along each axis at ``level``."""

    return 1 << level


def expected_tile_count(max_level: int) -> int:
    return sum(4**level for level in range(max_level + 1))


def _join(futures: Dict[Future, int], cancel_event: threading.Event) -> Dict[int, Any]:
    """Wait for every future; on the first failure signal cancellation, drain, then re-raise."""

    results: Dict[int, Any] = {}
    failure: Optional[BaseException] = None
    for future in as_completed(futures):
        key = futures[future]
        try:
            results[key] = future.result()
        except Exception as exc:
            if failure is None:
                failure = exc
            cancel_event.set()
    if failure is not None:
        raise failure
    return results


class PyramidManager:
    """Generate a multi-resolution tile pyramid from one source raster.

    Every level is resampled straight from the original source rather than
    from the level below it, so the chosen kernel alone governs the quality of
    each level and resampling error never compounds.

    Work fans out in two layers: one task per level, and inside each level one
    task per grid row. Columns of a row are written sequentially. Each layer
    joins its tasks before returning.
    """

    def __init__(self, config: TilingConfig, *, sink: Optional[TileSink] = None) -> None:
        if config.tile_size <= 0:
            raise ConfigurationError("tile size must be a positive integer")
        self._config = config
        self._kernel = resolve_kernel(config.kernel)
        self._sink = sink if sink is not None else FileTileSink(config)

    @property
    def config(self) -> TilingConfig:
        return self._config

    def check_max_level(self, max_level: int) -> None:
        minimum = self._config.min_max_level
        if max_level < minimum:
            raise InvalidLevelError(f"level must be at least {minimum}, got {max_level}")

    def generate_pyramid(
        self,
        source: SourceRaster,
        max_level: int,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> PyramidReport:
        """Write every tile of levels ``0..max_level`` and return the aggregated report."""

        self.check_max_level(max_level)
        cancel = cancel_event if cancel_event is not None else threading.Event()
        levels = list(range(max_level, -1, -1))
        workers = self._config.level_workers or len(levels)

        LOGGER.info(
            "generating pyramid",
            extra={
                "max_level": max_level,
                "tile_size": self._config.tile_size,
                "kernel": self._kernel.name,
                "source": f"{source.width}x{source.height}",
                "expected_tiles": expected_tile_count(max_level),
            },
        )

        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="zoomtiler-level") as pool:
            futures = {pool.submit(self._run_level, source, level, cancel): level for level in levels}
            try:
                level_reports: Dict[int, LevelReport] = _join(futures, cancel)
            except BaseException:
                cancel.set()
                raise

        report = PyramidReport(
            max_level=max_level,
            levels=[level_reports[level] for level in sorted(level_reports)],
            cancelled=cancel.is_set() or any(item.cancelled for item in level_reports.values()),
            duration_s=time.perf_counter() - start,
        )
        LOGGER.info(
            "pyramid finished",
            extra={
                "tiles": report.tile_count,
                "written": report.succeeded,
                "failed": len(report.failed),
                "cancelled": report.cancelled,
                "duration_s": f"{report.duration_s:.2f}",
            },
        )
        return report

    def _run_level(self, source: SourceRaster, level: int, cancel: threading.Event) -> LevelReport:
        side = level_side(level)
        report = LevelReport(level=level, side=side)
        if cancel.is_set():
            report.cancelled = True
            return report

        tile_size = self._config.tile_size
        target = side * tile_size
        LOGGER.info("resampling level", extra={"zoom": level, "size": target})
        raster = resize(source, target, target, self._kernel)
        check_level_raster(raster, tile_size, side)

        workers = self._config.row_workers or min(side, os.cpu_count() or 1)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"zoomtiler-l{level}") as pool:
            futures = {pool.submit(self._run_row, raster, level, y, side, cancel): y for y in range(side)}
            try:
                rows: Dict[int, Tuple[List[TileResult], bool]] = _join(futures, cancel)
            except BaseException:
                cancel.set()
                raise

        for y in sorted(rows):
            results, cancelled = rows[y]
            report.results.extend(results)
            report.cancelled = report.cancelled or cancelled

        LOGGER.info(
            "level finished",
            extra={
                "zoom": level,
                "written": report.succeeded,
                "failed": len(report.failed),
                "expected": report.expected,
            },
        )
        return report

    def _run_row(
        self,
        raster: np.ndarray,
        level: int,
        y: int,
        side: int,
        cancel: threading.Event,
    ) -> Tuple[List[TileResult], bool]:
        results: List[TileResult] = []
        for coordinate, buffer in partition_row(raster, level, y, self._config.tile_size, side):
            if cancel.is_set():
                LOGGER.debug("row cancelled", extra={"zoom": level, "y": y, "written": len(results)})
                return results, True
            results.append(self._sink.write_tile(buffer, coordinate))
        LOGGER.debug("row finished", extra={"zoom": level, "y": y})
        return results, False
