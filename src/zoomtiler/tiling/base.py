"""Protocol definitions for tile generation components."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from zoomtiler.core.models import TileCoordinate, TileResult


class TileSink(Protocol):
    """Interface for persisting encoded tiles."""

    def write_tile(self, buffer: np.ndarray, coordinate: TileCoordinate) -> TileResult:
        """Encode ``buffer`` and store it; report failures instead of raising."""
