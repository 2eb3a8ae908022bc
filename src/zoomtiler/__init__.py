"""Deep-zoom tile pyramid generation package."""

from __future__ import annotations

import importlib
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FileTileSink",
    "PyramidManager",
    "PyramidReport",
    "SourceRaster",
    "TileCoordinate",
    "TilingConfig",
    "decode_source",
    "load_config",
    "partition",
    "resize",
    "tile_file_name",
]

_MODULE_MAP = {
    "ConfigurationError": ("zoomtiler.core", "ConfigurationError"),
    "FileTileSink": ("zoomtiler.tiling", "FileTileSink"),
    "PyramidManager": ("zoomtiler.tiling", "PyramidManager"),
    "PyramidReport": ("zoomtiler.core", "PyramidReport"),
    "SourceRaster": ("zoomtiler.core", "SourceRaster"),
    "TileCoordinate": ("zoomtiler.core", "TileCoordinate"),
    "TilingConfig": ("zoomtiler.core", "TilingConfig"),
    "decode_source": ("zoomtiler.source", "decode_source"),
    "load_config": ("zoomtiler.config", "load_config"),
    "partition": ("zoomtiler.tiling", "partition"),
    "resize": ("zoomtiler.resampling", "resize"),
    "tile_file_name": ("zoomtiler.tiling", "tile_file_name"),
}


def __getattr__(name: str) -> Any:
    if name not in _MODULE_MAP:
        raise AttributeError(f"module 'zoomtiler' has no attribute '{name}'")
    module_name, attr = _MODULE_MAP[name]
    module = importlib.import_module(module_name)
    return getattr(module, attr)
