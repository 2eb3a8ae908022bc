"""Interpolation kernels available to the resampler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from zoomtiler.core.errors import UnknownKernelError

WeightFunction = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class Kernel:
    """A separable resampling filter.

    ``taps`` is the number of input samples the filter touches at unit scale;
    ``weight`` maps signed distances (in input pixels) to filter weights.
    """

    name: str
    taps: int
    weight: WeightFunction

    def __call__(self, offsets: np.ndarray) -> np.ndarray:
        return self.weight(offsets)


def _box(x: np.ndarray) -> np.ndarray:
    return np.where((x >= -0.5) & (x < 0.5), 1.0, 0.0)


def _triangle(x: np.ndarray) -> np.ndarray:
    ax = np.abs(x)
    return np.where(ax < 1.0, 1.0 - ax, 0.0)


def _cubic(b: float, c: float) -> WeightFunction:
    # Mitchell-Netravali family; (0, 0.5) is Catmull-Rom.
    def weight(x: np.ndarray) -> np.ndarray:
        ax = np.abs(x)
        ax2 = ax * ax
        ax3 = ax2 * ax
        near = ((12 - 9 * b - 6 * c) * ax3 + (-18 + 12 * b + 6 * c) * ax2 + (6 - 2 * b)) / 6.0
        far = ((-b - 6 * c) * ax3 + (6 * b + 30 * c) * ax2 + (-12 * b - 48 * c) * ax + (8 * b + 24 * c)) / 6.0
        return np.where(ax < 1.0, near, np.where(ax < 2.0, far, 0.0))

    return weight


def _lanczos(a: int) -> WeightFunction:
    def weight(x: np.ndarray) -> np.ndarray:
        return np.where(np.abs(x) < a, np.sinc(x) * np.sinc(x / a), 0.0)

    return weight


KERNELS: Dict[str, Kernel] = {
    "NearestNeighbor": Kernel("NearestNeighbor", 2, _box),
    "Bilinear": Kernel("Bilinear", 2, _triangle),
    "Bicubic": Kernel("Bicubic", 4, _cubic(0.0, 0.5)),
    "MitchellNetravali": Kernel("MitchellNetravali", 4, _cubic(1.0 / 3.0, 1.0 / 3.0)),
    "Lanczos2": Kernel("Lanczos2", 4, _lanczos(2)),
    "Lanczos3": Kernel("Lanczos3", 6, _lanczos(3)),
}


def kernel_names() -> Tuple[str, ...]:
    return tuple(KERNELS)


def resolve_kernel(name: str) -> Kernel:
    """Return the kernel registered under ``name`` or fail naming the valid set."""

    try:
        return KERNELS[name]
    except KeyError:
        valid = " ".join(KERNELS)
        raise UnknownKernelError(
            f"unknown interpolation function {name!r}; valid interpolation functions: {valid}"
        ) from None
