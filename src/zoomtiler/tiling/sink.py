"""Encode tile buffers and write them to the output directory."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import numpy as np
from PIL import Image

from zoomtiler.core.errors import UnsupportedEncodingError
from zoomtiler.core.models import TileCoordinate, TileResult, TilingConfig
from zoomtiler.logging import get_logger

from .base import TileSink

LOGGER = get_logger(__name__)

# Pillow encoder name per supported tile encoding.
ENCODERS: Dict[str, str] = {
    "png": "PNG",
    "jpeg": "JPEG",
}

LOSSY_ENCODINGS = frozenset({"jpeg"})


def tile_file_name(pattern: str, level: int, x: int, y: int) -> str:
    """Substitute ``{zoom}``, ``{x}`` and ``{y}`` literally; other text is kept."""

    name = pattern.replace("{zoom}", str(level))
    name = name.replace("{x}", str(x))
    return name.replace("{y}", str(y))


class FileTileSink(TileSink):
    """Write tiles as individual image files named from a pattern."""

    def __init__(self, config: TilingConfig) -> None:
        self._output_dir = Path(config.output_dir)
        self._pattern = config.pattern
        self._encoding = config.encoding
        self._quality = config.quality
        if self._encoding not in ENCODERS:
            raise UnsupportedEncodingError(f"encoding not supported: {self._encoding}")

    def tile_path(self, coordinate: TileCoordinate) -> Path:
        return self._output_dir / tile_file_name(self._pattern, coordinate.level, coordinate.x, coordinate.y)

    def encode(self, buffer: np.ndarray, destination: Path) -> None:
        image = Image.fromarray(buffer)
        options = {}
        if self._encoding in LOSSY_ENCODINGS:
            image = image.convert("RGB")
            options["quality"] = self._quality
        with destination.open("wb") as handle:
            image.save(handle, format=ENCODERS[self._encoding], **options)

    def write_tile(self, buffer: np.ndarray, coordinate: TileCoordinate) -> TileResult:
        path = self.tile_path(coordinate)
        try:
            self.encode(buffer, path)
        except (OSError, ValueError) as exc:
            LOGGER.warning(
                "tile write failed",
                extra={
                    "zoom": coordinate.level,
                    "x": coordinate.x,
                    "y": coordinate.y,
                    "path": str(path),
                    "error": str(exc),
                },
            )
            return TileResult(coordinate, path, error=str(exc))
        return TileResult(coordinate, path)
