"""CLI entry point for zoomtiler."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Iterable

from zoomtiler.config import load_config, merge_overrides, validate_config
from zoomtiler.core.errors import (
    ConfigurationError,
    InvalidLevelError,
    OutputDirectoryError,
    SourceReadError,
)
from zoomtiler.core.models import TilingConfig
from zoomtiler.logging import configure_logging, get_logger
from zoomtiler.resampling import kernel_names
from zoomtiler.source import check_source_format, decode_source
from zoomtiler.tiling import PyramidManager, write_report

LOGGER = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130

_LEVEL_RE = re.compile(r"[+-]?[0-9]+")


def build_parser() -> argparse.ArgumentParser:
    defaults = TilingConfig()
    parser = argparse.ArgumentParser(
        prog="zoomtiler",
        description="Cut a source image into a multi-resolution square tile pyramid",
    )
    parser.add_argument("max_level", metavar="maxLevel", help="Deepest zoom level to generate (base-10 integer)")
    parser.add_argument("source", metavar="sourceFilePath", type=Path, help="Source image (.png or .bmp)")

    parser.add_argument(
        "-size",
        "--tile-size",
        dest="tile_size",
        type=int,
        default=None,
        help=f"Tile size in pixels (default: {defaults.tile_size})",
    )
    parser.add_argument(
        "-q",
        "--quality",
        dest="quality",
        type=int,
        default=None,
        help=f"JPEG quality setting (default: {defaults.quality})",
    )
    parser.add_argument(
        "-e",
        "--encoding",
        dest="encoding",
        default=None,
        help=f"Image encoding, png or jpeg (default: {defaults.encoding})",
    )
    parser.add_argument(
        "-p",
        "--pattern",
        dest="pattern",
        default=None,
        help=f"Naming pattern for output files (default: {defaults.pattern})",
    )
    parser.add_argument(
        "-interp",
        "--interp",
        dest="kernel",
        default=None,
        help=f"Interpolation function, one of {', '.join(kernel_names())} (default: {defaults.kernel})",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_dir",
        type=Path,
        default=None,
        help=f"Output directory for tile files (default: {defaults.output_dir})",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a tiling configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--allow-single-level",
        action="store_true",
        help="Accept maxLevel 0 and emit a single-tile pyramid",
    )
    parser.add_argument("--level-workers", type=int, default=None, help="Levels processed concurrently")
    parser.add_argument("--row-workers", type=int, default=None, help="Rows processed concurrently per level")
    parser.add_argument("--report", type=Path, default=None, help="Write a JSON run report to this path")
    parser.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(level=args.log_level, json_logs=args.log_json, log_file=args.log_file)

    try:
        config = _resolve_config(args)
        max_level = _parse_level(args.max_level)
        manager = PyramidManager(config)
        manager.check_max_level(max_level)
        check_source_format(args.source)
    except ConfigurationError as exc:
        LOGGER.error(str(exc))
        return EXIT_CONFIG
    except (OSError, ValueError) as exc:
        LOGGER.error("failed to load configuration: %s", exc)
        return EXIT_CONFIG

    try:
        _prepare_output_dir(config.output_dir)
        source = decode_source(args.source)
    except (OutputDirectoryError, SourceReadError) as exc:
        LOGGER.error(str(exc))
        return EXIT_FAILURE

    try:
        report = manager.generate_pyramid(source, max_level)
    except KeyboardInterrupt:
        LOGGER.error("interrupted; in-flight tiles were cancelled")
        return EXIT_INTERRUPTED

    if args.report is not None:
        path = write_report(report, args.report, config=config, source=args.source)
        LOGGER.info("run report written", extra={"path": str(path)})

    if report.failed:
        LOGGER.error(
            "%d of %d tiles failed",
            len(report.failed),
            report.tile_count,
            extra={"failed": [f"{r.coordinate.level}/{r.coordinate.x}/{r.coordinate.y}" for r in report.failed]},
        )
        return EXIT_FAILURE
    LOGGER.info("tiles written", extra={"count": report.succeeded, "output_dir": str(config.output_dir)})
    return EXIT_OK


def _resolve_config(args: argparse.Namespace) -> TilingConfig:
    if args.config is not None:
        resolved = args.config.resolve()
        if not resolved.exists():
            raise ConfigurationError(f"Configuration file not found: {resolved}")
        config = load_config(resolved)
    else:
        config = TilingConfig()

    config = merge_overrides(
        config,
        tile_size=args.tile_size,
        quality=args.quality,
        encoding=args.encoding,
        pattern=args.pattern,
        kernel=args.kernel,
        output_dir=args.output_dir,
        level_workers=args.level_workers,
        row_workers=args.row_workers,
        min_max_level=0 if args.allow_single_level else None,
    )
    return validate_config(config)


def _parse_level(value: str) -> int:
    if not _LEVEL_RE.fullmatch(value):
        raise InvalidLevelError(f"level must be a base-10 integer, got {value!r}")
    return int(value, 10)


def _prepare_output_dir(output_dir: Path) -> None:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"cannot create output directory {output_dir}: {exc}") from exc


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
