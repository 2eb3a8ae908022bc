"""Shared pytest fixtures for zoomtiler tests."""

from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from PIL import Image

from zoomtiler.core.models import SourceRaster


def make_gradient(width: int, height: int) -> np.ndarray:
    """Return an opaque RGBA gradient with distinct values per pixel position."""

    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = (xs * 7) % 256
    pixels[:, :, 1] = (ys * 11) % 256
    pixels[:, :, 2] = (xs * 3 + ys * 5) % 256
    pixels[:, :, 3] = 255
    return pixels


@pytest.fixture()
def gradient() -> Callable[[int, int], SourceRaster]:
    def factory(width: int, height: int) -> SourceRaster:
        return SourceRaster(make_gradient(width, height))

    return factory


@pytest.fixture()
def write_image(tmp_path: Path) -> Callable[..., Path]:
    def writer(name: str, width: int = 40, height: int = 30, mode: str = "RGB") -> Path:
        path = tmp_path / name
        image = Image.fromarray(make_gradient(width, height)).convert(mode)
        image.save(path)
        return path

    return writer
