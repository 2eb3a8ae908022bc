"""Exception hierarchy shared across zoomtiler components."""

from __future__ import annotations


class ZoomTilerError(RuntimeError):
    """Base class for all zoomtiler failures."""


class ConfigurationError(ZoomTilerError, ValueError):
    """Raised when settings are rejected before any work starts."""


class UnknownKernelError(ConfigurationError):
    """Raised when an interpolation kernel name is not recognised."""


class UnsupportedEncodingError(ConfigurationError):
    """Raised when the requested tile encoding is not supported."""


class UnsupportedSourceFormatError(ConfigurationError):
    """Raised when the source file extension has no decoder."""


class InvalidLevelError(ConfigurationError):
    """Raised when the requested pyramid depth is out of range."""


class SourceReadError(ZoomTilerError):
    """Raised when the source raster cannot be opened or decoded."""


class OutputDirectoryError(ZoomTilerError):
    """Raised when the tile output directory cannot be prepared."""
