"""Tile pyramid generation for zoomtiler."""

from .base import TileSink
from .manager import PyramidManager, expected_tile_count, level_side
from .partition import extract_tile, partition, partition_row, tile_rect
from .report import report_to_dict, write_report
from .sink import ENCODERS, FileTileSink, tile_file_name

__all__ = [
    "ENCODERS",
    "FileTileSink",
    "PyramidManager",
    "TileSink",
    "expected_tile_count",
    "extract_tile",
    "level_side",
    "partition",
    "partition_row",
    "report_to_dict",
    "tile_file_name",
    "tile_rect",
    "write_report",
]
