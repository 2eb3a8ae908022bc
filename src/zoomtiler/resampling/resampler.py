"""Separable raster resizing on top of numpy."""

from __future__ import annotations

import math
from typing import Tuple, Union

import numpy as np

from zoomtiler.core.models import SourceRaster
from zoomtiler.logging import get_logger

from .kernels import Kernel, resolve_kernel

LOGGER = get_logger(__name__)


def contributions(in_size: int, out_size: int, kernel: Kernel) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(indices, weights)`` of shape ``(out_size, filter_length)`` for one axis.

    Each output sample ``i`` is centred on input position ``scale * (i + 0.5) - 0.5``.
    When shrinking, the kernel is stretched by ``scale`` so every input pixel
    contributes. Indices past the edge are clamped and each row of weights sums to 1.
    """

    if in_size < 1 or out_size < 1:
        raise ValueError(f"axis sizes must be positive, got {in_size} -> {out_size}")

    scale = in_size / out_size
    filter_length = kernel.taps * max(int(math.ceil(scale)), 1)
    stretch = max(scale, 1.0)

    centres = scale * (np.arange(out_size, dtype=np.float64) + 0.5) - 0.5
    starts = np.floor(centres).astype(np.int64) - filter_length // 2 + 1
    positions = starts[:, None] + np.arange(filter_length, dtype=np.int64)[None, :]

    weights = kernel((centres[:, None] - positions) / stretch)
    totals = weights.sum(axis=1, keepdims=True)
    weights = weights / np.where(totals == 0.0, 1.0, totals)

    indices = np.clip(positions, 0, in_size - 1)
    return indices, weights


# Float32 elements per working band; bounds the temporaries of one pass.
BAND_ELEMENTS = 1 << 18


def _band_rows(width: int) -> int:
    return max(1, BAND_ELEMENTS // (width * 4))


def _accumulate(data: np.ndarray, indices: np.ndarray, weights: np.ndarray, axis: int, out: np.ndarray) -> None:
    shape = [1] * data.ndim
    shape[axis] = indices.shape[0]
    for tap in range(indices.shape[1]):
        column = weights[:, tap]
        if not column.any():
            continue
        taken = np.take(data, indices[:, tap], axis=axis)
        taken *= column.reshape(shape)
        out += taken


def _horizontal_pass(pixels: np.ndarray, width: int, kernel: Kernel, translucent: bool) -> np.ndarray:
    """Resample along x into a float32 ``(source_height, width, 4)`` intermediate."""

    indices, weights = contributions(pixels.shape[1], width, kernel)
    weights = weights.astype(np.float32)
    rows = pixels.shape[0]
    result = np.zeros((rows, width, 4), dtype=np.float32)
    step = _band_rows(max(pixels.shape[1], width))
    for top in range(0, rows, step):
        band = pixels[top:top + step].astype(np.float32)
        if translucent:
            band[:, :, :3] *= band[:, :, 3:4] / np.float32(255.0)
        _accumulate(band, indices, weights, axis=1, out=result[top:top + step])
    return result


def _vertical_pass(data: np.ndarray, height: int, kernel: Kernel, translucent: bool) -> np.ndarray:
    """Resample along y band by band, rounding each band into the uint8 output."""

    indices, weights = contributions(data.shape[0], height, kernel)
    weights = weights.astype(np.float32)
    width = data.shape[1]
    output = np.empty((height, width, 4), dtype=np.uint8)
    step = _band_rows(width)
    scratch = np.empty((min(step, height), width, 4), dtype=np.float32)
    for top in range(0, height, step):
        bottom = min(top + step, height)
        band = scratch[: bottom - top]
        band.fill(0.0)
        _accumulate(data, indices[top:bottom], weights[top:bottom], axis=0, out=band)
        if translucent:
            _unpremultiply(band)
        np.rint(band, out=band)
        np.clip(band, 0.0, 255.0, out=band)
        output[top:bottom] = band
    return output


def _unpremultiply(band: np.ndarray) -> None:
    alpha = np.clip(band[:, :, 3:4], 0.0, 255.0)
    opaque = alpha > 0.0
    safe = np.where(opaque, alpha, np.float32(1.0))
    band[:, :, :3] = np.where(opaque, band[:, :, :3] * np.float32(255.0) / safe, np.float32(0.0))


def resize(
    source: Union[SourceRaster, np.ndarray],
    width: int,
    height: int,
    kernel: Union[Kernel, str],
) -> np.ndarray:
    """Return a new ``(height, width, 4)`` uint8 raster resampled from ``source``.

    Translucent rasters are filtered in premultiplied-alpha space so fully
    transparent pixels do not bleed colour into their neighbours. Both passes
    work in float32 over row bands, so peak memory stays a small multiple of
    the uint8 result.
    """

    if width < 1 or height < 1:
        raise ValueError(f"target size must be positive, got {width}x{height}")
    if isinstance(kernel, str):
        kernel = resolve_kernel(kernel)

    pixels = source.pixels if isinstance(source, SourceRaster) else np.asarray(source)
    translucent = bool(pixels[:, :, 3].min() < 255)

    LOGGER.debug(
        "resize",
        extra={"src": f"{pixels.shape[1]}x{pixels.shape[0]}", "dst": f"{width}x{height}", "kernel": kernel.name},
    )

    intermediate = _horizontal_pass(pixels, width, kernel, translucent)
    return _vertical_pass(intermediate, height, kernel, translucent)
