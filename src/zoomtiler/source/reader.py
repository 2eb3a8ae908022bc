"""Decode source images into shared, read-only rasters."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import numpy as np
from PIL import Image

from zoomtiler.core.errors import SourceReadError, UnsupportedSourceFormatError
from zoomtiler.core.models import SourceRaster
from zoomtiler.logging import get_logger

LOGGER = get_logger(__name__)

# Large scans are expected input.
Image.MAX_IMAGE_PIXELS = None

# Pillow format name expected for each accepted file extension.
DECODERS: Dict[str, str] = {
    ".png": "PNG",
    ".bmp": "BMP",
}


def check_source_format(path: Path | str) -> str:
    """Return the decoder name for ``path`` or raise for unsupported extensions."""

    suffix = Path(path).suffix.lower()
    try:
        return DECODERS[suffix]
    except KeyError:
        supported = ", ".join(sorted(DECODERS))
        raise UnsupportedSourceFormatError(
            f"unsupported file format {suffix or '(none)'!r}; supported: {supported}"
        ) from None


def decode_source(path: Path | str) -> SourceRaster:
    """Load ``path`` into an RGBA :class:`SourceRaster`."""

    source_path = Path(path)
    decoder = check_source_format(source_path)

    try:
        with Image.open(source_path, formats=[decoder]) as image:
            image.load()
            rgba = image.convert("RGBA")
    except FileNotFoundError as exc:
        raise SourceReadError(f"source file not found: {source_path}") from exc
    except (OSError, ValueError) as exc:
        raise SourceReadError(f"failed to decode {source_path}: {exc}") from exc

    raster = SourceRaster(np.array(rgba, dtype=np.uint8))
    LOGGER.info(
        "decoded source",
        extra={"path": str(source_path), "format": decoder, "width": raster.width, "height": raster.height},
    )
    return raster
