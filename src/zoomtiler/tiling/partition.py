"""Split a resampled level raster into its grid of tiles."""

from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np

from zoomtiler.core.models import TileCoordinate

Rect = Tuple[int, int, int, int]


def tile_rect(x: int, y: int, tile_size: int) -> Rect:
    """Return the ``(left, top, right, bottom)`` pixel box of grid cell ``(x, y)``."""

    left = x * tile_size
    top = y * tile_size
    return (left, top, left + tile_size, top + tile_size)


def check_level_raster(raster: np.ndarray, tile_size: int, side: int) -> None:
    expected = side * tile_size
    if raster.shape[0] != expected or raster.shape[1] != expected:
        raise ValueError(
            f"level raster is {raster.shape[1]}x{raster.shape[0]}, expected {expected}x{expected}"
        )


def extract_tile(raster: np.ndarray, x: int, y: int, tile_size: int) -> np.ndarray:
    """Copy one cell out of ``raster``; the result never shares memory with it."""

    left, top, right, bottom = tile_rect(x, y, tile_size)
    return raster[top:bottom, left:right].copy()


def partition_row(
    raster: np.ndarray,
    level: int,
    y: int,
    tile_size: int,
    side: int,
) -> Iterator[Tuple[TileCoordinate, np.ndarray]]:
    """Yield the tiles of row ``y`` from left to right."""

    for x in range(side):
        yield TileCoordinate(level, x, y), extract_tile(raster, x, y, tile_size)


def partition(
    raster: np.ndarray,
    tile_size: int,
    side: int,
    *,
    level: int = 0,
) -> Iterator[Tuple[TileCoordinate, np.ndarray]]:
    """Yield every tile of a ``side`` x ``side`` grid in row-major order."""

    check_level_raster(raster, tile_size, side)
    for y in range(side):
        yield from partition_row(raster, level, y, tile_size, side)
