"""Configuration loading utilities for zoomtiler."""

from .loader import ConfigLoader, load_config, merge_overrides, validate_config

__all__ = ["ConfigLoader", "load_config", "merge_overrides", "validate_config"]
