"""Dataclasses describing core zoomtiler entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


@dataclass
class TilingConfig:
    """Configuration options that control pyramid generation."""

    tile_size: int = 256
    quality: int = 5
    encoding: str = "png"
    pattern: str = "{zoom}_{x}_{y}.png"
    kernel: str = "Bicubic"
    output_dir: Path = Path("tiles")
    min_max_level: int = 1
    level_workers: Optional[int] = None
    row_workers: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tile_size": self.tile_size,
            "quality": self.quality,
            "encoding": self.encoding,
            "pattern": self.pattern,
            "kernel": self.kernel,
            "output_dir": str(self.output_dir),
            "min_max_level": self.min_max_level,
            "level_workers": self.level_workers,
            "row_workers": self.row_workers,
        }


@dataclass(frozen=True)
class SourceRaster:
    """Immutable RGBA pixel grid shared by every level worker."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"expected an (height, width, 4) array, got shape {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"expected uint8 pixels, got {self.pixels.dtype}")
        if self.pixels.shape[0] < 1 or self.pixels.shape[1] < 1:
            raise ValueError("source raster must be at least 1x1")
        self.pixels.setflags(write=False)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "SourceRaster":
        """Wrap an RGB or RGBA ``uint8`` array, copying it so callers keep ownership."""

        data = np.asarray(array, dtype=np.uint8)
        if data.ndim == 3 and data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), 255, dtype=np.uint8)
            data = np.concatenate([data, alpha], axis=2)
        return cls(np.array(data, dtype=np.uint8, copy=True, order="C"))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def has_alpha(self) -> bool:
        return bool((self.pixels[:, :, 3] != 255).any())


@dataclass(frozen=True, order=True)
class TileCoordinate:
    """Position of one output tile within the pyramid."""

    level: int
    x: int
    y: int


@dataclass
class TileResult:
    """Outcome of handing one tile buffer to the sink."""

    coordinate: TileCoordinate
    path: Path
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LevelReport:
    """Results collected by one level worker."""

    level: int
    side: int
    results: List[TileResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def expected(self) -> int:
        return self.side * self.side

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> List[TileResult]:
        return [result for result in self.results if not result.ok]


@dataclass
class PyramidReport:
    """Aggregated outcome of a full pyramid run."""

    max_level: int
    levels: List[LevelReport] = field(default_factory=list)
    cancelled: bool = False
    duration_s: float = 0.0

    @property
    def tile_count(self) -> int:
        return sum(len(level.results) for level in self.levels)

    @property
    def succeeded(self) -> int:
        return sum(level.succeeded for level in self.levels)

    @property
    def failed(self) -> List[TileResult]:
        failures: List[TileResult] = []
        for level in self.levels:
            failures.extend(level.failed)
        return sorted(failures, key=lambda result: result.coordinate)

    @property
    def ok(self) -> bool:
        return not self.cancelled and not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_level": self.max_level,
            "tile_count": self.tile_count,
            "succeeded": self.succeeded,
            "cancelled": self.cancelled,
            "duration_s": round(self.duration_s, 3),
            "levels": [
                {
                    "level": level.level,
                    "side": level.side,
                    "expected": level.expected,
                    "written": level.succeeded,
                    "failed": len(level.failed),
                    "cancelled": level.cancelled,
                }
                for level in sorted(self.levels, key=lambda item: item.level)
            ],
            "failures": [
                {
                    "level": result.coordinate.level,
                    "x": result.coordinate.x,
                    "y": result.coordinate.y,
                    "path": str(result.path),
                    "error": result.error,
                }
                for result in self.failed
            ],
        }
