"""Source image decoding for zoomtiler."""

from .reader import DECODERS, check_source_format, decode_source

__all__ = ["DECODERS", "check_source_format", "decode_source"]
