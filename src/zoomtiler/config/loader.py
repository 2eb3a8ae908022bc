"""Configuration management with YAML and JSON support."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from zoomtiler.core.errors import ConfigurationError, UnsupportedEncodingError
from zoomtiler.core.models import TilingConfig
from zoomtiler.resampling import resolve_kernel

ENCODING_ALIASES = {"png": "png", "jpeg": "jpeg", "jpg": "jpeg"}

_INT_FIELDS = ("tile_size", "quality", "min_max_level")
_OPTIONAL_INT_FIELDS = ("level_workers", "row_workers")
_STR_FIELDS = ("pattern", "kernel", "encoding")


class ConfigLoader:
    """Load tiling configuration files in YAML or JSON format."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path.cwd()

    def load(self, path: Path | str) -> TilingConfig:
        """Parse a configuration file and return a populated dataclass."""

        config_path = self._resolve_path(Path(path))
        payload = self._load_payload(config_path)
        config = self._build_config(payload)
        if not config.output_dir.is_absolute():
            config.output_dir = config_path.parent / config.output_dir
        return config

    def _resolve_path(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return (self._base_dir / path).resolve()

    def _load_payload(self, path: Path) -> Dict[str, Any]:
        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as handle:
                try:
                    return yaml.safe_load(handle) or {}
                except yaml.YAMLError as exc:
                    raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
        if suffix == ".json":
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle) or {}
        raise ValueError(f"Unsupported configuration format: {suffix}")

    def _build_config(self, payload: Dict[str, Any]) -> TilingConfig:
        if not isinstance(payload, dict):
            raise ValueError("configuration root must be a mapping")
        section = payload.get("tiling", payload)
        if not isinstance(section, dict):
            raise ValueError("tiling section must be a mapping")

        known = {item.name for item in dataclasses.fields(TilingConfig)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise ValueError(f"unknown tiling settings: {', '.join(unknown)}")

        data = dict(section)
        for key in _INT_FIELDS + _OPTIONAL_INT_FIELDS:
            if key in data and (data[key] is not None or key in _INT_FIELDS):
                data[key] = _as_int(key, data[key])
        for key in _STR_FIELDS:
            if key in data and not isinstance(data[key], str):
                raise ConfigurationError(f"{key} must be a string, got {data[key]!r}")
        if "output_dir" in data:
            try:
                data["output_dir"] = Path(data["output_dir"])
            except TypeError:
                raise ConfigurationError(f"output_dir must be a path, got {data['output_dir']!r}") from None
        return TilingConfig(**data)


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None


def load_config(path: Path | str, *, base_dir: Optional[Path] = None) -> TilingConfig:
    """Convenience wrapper around :class:`ConfigLoader`."""

    loader = ConfigLoader(base_dir=base_dir)
    return loader.load(path)


def merge_overrides(config: TilingConfig, **overrides: Any) -> TilingConfig:
    """Return a copy of ``config`` with every non-``None`` override applied."""

    values = {key: value for key, value in overrides.items() if value is not None}
    if "output_dir" in values:
        values["output_dir"] = Path(values["output_dir"])
    return dataclasses.replace(config, **values)


def validate_config(config: TilingConfig) -> TilingConfig:
    """Normalise ``config`` and reject settings that would fail mid-run."""

    for key in _STR_FIELDS:
        if not isinstance(getattr(config, key), str):
            raise ConfigurationError(f"{key} must be a string, got {getattr(config, key)!r}")
    if not isinstance(config.output_dir, Path):
        raise ConfigurationError(f"output_dir must be a path, got {config.output_dir!r}")
    for key in _INT_FIELDS:
        value = getattr(config, key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")

    if config.tile_size <= 0:
        raise ConfigurationError("tile size must be a positive integer")

    resolve_kernel(config.kernel)

    encoding = ENCODING_ALIASES.get(str(config.encoding).lower())
    if encoding is None:
        raise UnsupportedEncodingError(
            f"unsupported encoding {config.encoding!r}; supported: png, jpeg"
        )
    if encoding == "jpeg" and not 1 <= config.quality <= 100:
        raise ConfigurationError(f"jpeg quality must be between 1 and 100, got {config.quality}")

    if config.min_max_level not in (0, 1):
        raise ConfigurationError("min_max_level must be 0 or 1")
    for key in _OPTIONAL_INT_FIELDS:
        value = getattr(config, key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")
        if value is not None and value < 1:
            raise ConfigurationError(f"{key} must be a positive integer")

    return dataclasses.replace(config, encoding=encoding)
