"""Core data models for zoomtiler."""

from .errors import (
    ConfigurationError,
    InvalidLevelError,
    OutputDirectoryError,
    SourceReadError,
    UnknownKernelError,
    UnsupportedEncodingError,
    UnsupportedSourceFormatError,
    ZoomTilerError,
)
from .models import (
    LevelReport,
    PyramidReport,
    SourceRaster,
    TileCoordinate,
    TileResult,
    TilingConfig,
)

__all__ = [
    "ConfigurationError",
    "InvalidLevelError",
    "LevelReport",
    "OutputDirectoryError",
    "PyramidReport",
    "SourceRaster",
    "SourceReadError",
    "TileCoordinate",
    "TileResult",
    "TilingConfig",
    "UnknownKernelError",
    "UnsupportedEncodingError",
    "UnsupportedSourceFormatError",
    "ZoomTilerError",
]
