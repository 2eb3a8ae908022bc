"""Raster resampling for zoomtiler."""

from .kernels import KERNELS, Kernel, kernel_names, resolve_kernel
from .resampler import contributions, resize

__all__ = ["KERNELS", "Kernel", "contributions", "kernel_names", "resize", "resolve_kernel"]
