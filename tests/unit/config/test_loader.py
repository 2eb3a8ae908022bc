import json
from pathlib import Path

import pytest

from zoomtiler.config import load_config, merge_overrides, validate_config
from zoomtiler.core.errors import ConfigurationError, UnknownKernelError, UnsupportedEncodingError
from zoomtiler.core.models import TilingConfig


def test_yaml_tiling_section_is_loaded(tmp_path: Path) -> None:
    path = tmp_path / "tiling.yaml"
    path.write_text(
        "tiling:\n"
        "  tile_size: 512\n"
        "  encoding: jpeg\n"
        "  quality: 80\n"
        "  kernel: Lanczos3\n"
        "  output_dir: out/tiles\n"
        "  row_workers: 2\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.tile_size == 512
    assert config.encoding == "jpeg"
    assert config.quality == 80
    assert config.kernel == "Lanczos3"
    assert config.output_dir == tmp_path / "out" / "tiles"
    assert config.row_workers == 2
    assert config.pattern == "{zoom}_{x}_{y}.png"


def test_json_top_level_keys_are_loaded(tmp_path: Path) -> None:
    path = tmp_path / "tiling.json"
    path.write_text(json.dumps({"tile_size": "128", "pattern": "{zoom}-{x}-{y}.png"}), encoding="utf-8")

    config = load_config(path)

    assert config.tile_size == 128
    assert config.pattern == "{zoom}-{x}-{y}.png"
    assert config.output_dir == tmp_path / "tiles"


def test_relative_path_resolves_against_base_dir(tmp_path: Path) -> None:
    (tmp_path / "conf.yml").write_text("tile_size: 64\n", encoding="utf-8")

    config = load_config("conf.yml", base_dir=tmp_path)

    assert config.tile_size == 64


def test_unknown_settings_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "tiling.yaml"
    path.write_text("tiling:\n  tile_sise: 64\n", encoding="utf-8")

    with pytest.raises(ValueError, match="tile_sise"):
        load_config(path)


def test_unsupported_config_format(tmp_path: Path) -> None:
    path = tmp_path / "tiling.toml"
    path.write_text("tile_size = 64\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_merge_overrides_skips_unset_values() -> None:
    base = TilingConfig(tile_size=512, kernel="Bilinear")

    merged = merge_overrides(base, tile_size=None, kernel="Lanczos2", output_dir="elsewhere")

    assert merged.tile_size == 512
    assert merged.kernel == "Lanczos2"
    assert merged.output_dir == Path("elsewhere")
    assert base.kernel == "Bilinear"


def test_validate_normalises_jpg_alias() -> None:
    assert validate_config(TilingConfig(encoding="JPG", quality=75)).encoding == "jpeg"


@pytest.mark.parametrize(
    "config,error",
    [
        (TilingConfig(tile_size=0), ConfigurationError),
        (TilingConfig(tile_size=-256), ConfigurationError),
        (TilingConfig(kernel="Foo"), UnknownKernelError),
        (TilingConfig(encoding="gif"), UnsupportedEncodingError),
        (TilingConfig(encoding="jpeg", quality=0), ConfigurationError),
        (TilingConfig(encoding="jpeg", quality=101), ConfigurationError),
        (TilingConfig(min_max_level=2), ConfigurationError),
        (TilingConfig(row_workers=0), ConfigurationError),
    ],
)
def test_validate_rejects_bad_settings(config: TilingConfig, error: type) -> None:
    with pytest.raises(error):
        validate_config(config)


def test_quality_is_ignored_for_lossless_encoding() -> None:
    assert validate_config(TilingConfig(encoding="png", quality=0)).quality == 0


def test_malformed_yaml_is_a_value_error(tmp_path: Path) -> None:
    path = tmp_path / "tiling.yaml"
    path.write_text("tiling: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)


@pytest.mark.parametrize(
    "body,key",
    [
        ("tiling:\n  pattern: {zoom}\n", "pattern"),
        ("tiling:\n  kernel: [Bicubic]\n", "kernel"),
        ("tiling:\n  encoding: 1\n", "encoding"),
        ("tiling:\n  output_dir:\n", "output_dir"),
        ("tiling:\n  output_dir: {a: b}\n", "output_dir"),
        ("tiling:\n  tile_size: [256]\n", "tile_size"),
        ("tiling:\n  tile_size: big\n", "tile_size"),
        ("tiling:\n  tile_size:\n", "tile_size"),
        ("tiling:\n  quality: 7.5\n", "quality"),
        ("tiling:\n  min_max_level: true\n", "min_max_level"),
        ("tiling:\n  row_workers: {n: 2}\n", "row_workers"),
    ],
)
def test_wrongly_typed_values_are_configuration_errors(tmp_path: Path, body: str, key: str) -> None:
    path = tmp_path / "tiling.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=key):
        load_config(path)


def test_null_worker_counts_mean_automatic(tmp_path: Path) -> None:
    path = tmp_path / "tiling.yaml"
    path.write_text("tiling:\n  level_workers:\n  row_workers: 3\n", encoding="utf-8")

    config = load_config(path)

    assert config.level_workers is None
    assert config.row_workers == 3


@pytest.mark.parametrize(
    "config,key",
    [
        (TilingConfig(pattern={"zoom": None}), "pattern"),  # type: ignore[arg-type]
        (TilingConfig(kernel=None), "kernel"),  # type: ignore[arg-type]
        (TilingConfig(output_dir=None), "output_dir"),  # type: ignore[arg-type]
        (TilingConfig(tile_size="256"), "tile_size"),  # type: ignore[arg-type]
        (TilingConfig(level_workers=1.5), "level_workers"),  # type: ignore[arg-type]
    ],
)
def test_validate_rejects_wrongly_typed_settings(config: TilingConfig, key: str) -> None:
    with pytest.raises(ConfigurationError, match=key):
        validate_config(config)
