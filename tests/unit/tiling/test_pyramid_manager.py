import threading
from pathlib import Path
from typing import List

import numpy as np
import pytest
from PIL import Image

from zoomtiler.core.errors import ConfigurationError, InvalidLevelError, UnknownKernelError
from zoomtiler.core.models import TileCoordinate, TileResult, TilingConfig
from zoomtiler.resampling import resize
from zoomtiler.tiling import PyramidManager, expected_tile_count
from zoomtiler.tiling import manager as manager_module


class RecordingSink:
    def __init__(self, fail: frozenset = frozenset()) -> None:
        self.calls: List[TileCoordinate] = []
        self.buffers = {}
        self._fail = fail
        self._lock = threading.Lock()

    def write_tile(self, buffer, coordinate):  # type: ignore[no-untyped-def]
        with self._lock:
            self.calls.append(coordinate)
            self.buffers[coordinate] = buffer
        path = Path(f"{coordinate.level}_{coordinate.x}_{coordinate.y}.png")
        if coordinate in self._fail:
            return TileResult(coordinate, path, error="disk full")
        return TileResult(coordinate, path)


def _all_coordinates(max_level: int) -> List[TileCoordinate]:
    return [
        TileCoordinate(level, x, y)
        for level in range(max_level + 1)
        for y in range(1 << level)
        for x in range(1 << level)
    ]


def test_expected_tile_count_sums_powers_of_four() -> None:
    assert expected_tile_count(0) == 1
    assert expected_tile_count(1) == 5
    assert expected_tile_count(3) == 1 + 4 + 16 + 64


def test_every_coordinate_is_written_once(tmp_path: Path, gradient) -> None:
    config = TilingConfig(tile_size=8, output_dir=tmp_path)
    manager = PyramidManager(config)

    report = manager.generate_pyramid(gradient(20, 13), 2)

    assert report.ok
    assert report.tile_count == expected_tile_count(2)
    written = sorted(path.name for path in tmp_path.iterdir())
    expected = sorted(f"{c.level}_{c.x}_{c.y}.png" for c in _all_coordinates(2))
    assert written == expected
    for path in tmp_path.iterdir():
        with Image.open(path) as image:
            assert image.size == (8, 8)


def test_top_levels_match_resampled_source(tmp_path: Path, gradient) -> None:
    source = gradient(32, 32)
    sink = RecordingSink()
    manager = PyramidManager(TilingConfig(tile_size=16, output_dir=tmp_path), sink=sink)

    report = manager.generate_pyramid(source, 1)

    assert report.tile_count == 5
    np.testing.assert_array_equal(sink.buffers[TileCoordinate(0, 0, 0)], resize(source, 16, 16, "Bicubic"))
    for x in range(2):
        for y in range(2):
            expected = source.pixels[y * 16:(y + 1) * 16, x * 16:(x + 1) * 16]
            np.testing.assert_array_equal(sink.buffers[TileCoordinate(1, x, y)], expected)


def test_every_level_resamples_the_original_source(monkeypatch: pytest.MonkeyPatch, gradient) -> None:
    seen = []

    def spy(source, width, height, kernel):  # type: ignore[no-untyped-def]
        seen.append((source, width))
        return resize(source, width, height, kernel)

    monkeypatch.setattr(manager_module, "resize", spy)
    source = gradient(10, 10)
    manager = PyramidManager(TilingConfig(tile_size=4), sink=RecordingSink())

    manager.generate_pyramid(source, 3)

    assert sorted(width for _, width in seen) == [4, 8, 16, 32]
    assert all(item is source for item, _ in seen)


def test_level_zero_request_is_rejected_by_default(tmp_path: Path, gradient) -> None:
    sink = RecordingSink()
    manager = PyramidManager(TilingConfig(tile_size=8, output_dir=tmp_path), sink=sink)

    with pytest.raises(InvalidLevelError):
        manager.generate_pyramid(gradient(8, 8), 0)
    assert sink.calls == []


def test_level_zero_allowed_when_rule_relaxed(gradient) -> None:
    sink = RecordingSink()
    manager = PyramidManager(TilingConfig(tile_size=8, min_max_level=0), sink=sink)

    report = manager.generate_pyramid(gradient(30, 30), 0)

    assert sink.calls == [TileCoordinate(0, 0, 0)]
    assert report.ok


def test_invalid_settings_fail_before_any_work() -> None:
    with pytest.raises(UnknownKernelError):
        PyramidManager(TilingConfig(kernel="Foo"), sink=RecordingSink())
    with pytest.raises(ConfigurationError):
        PyramidManager(TilingConfig(tile_size=0), sink=RecordingSink())


def test_tile_failures_are_collected_and_siblings_continue(gradient) -> None:
    failing = frozenset({TileCoordinate(1, 1, 0), TileCoordinate(2, 3, 3)})
    sink = RecordingSink(fail=failing)
    manager = PyramidManager(TilingConfig(tile_size=4, row_workers=2), sink=sink)

    report = manager.generate_pyramid(gradient(16, 16), 2)

    assert sorted(sink.calls) == sorted(_all_coordinates(2))
    assert [result.coordinate for result in report.failed] == sorted(failing)
    assert report.succeeded == expected_tile_count(2) - 2
    assert not report.ok
    payload = report.to_dict()
    assert payload["succeeded"] == report.succeeded
    assert {(item["level"], item["x"], item["y"]) for item in payload["failures"]} == {(1, 1, 0), (2, 3, 3)}


def test_preset_cancellation_skips_all_work(gradient) -> None:
    sink = RecordingSink()
    manager = PyramidManager(TilingConfig(tile_size=4), sink=sink)
    cancel = threading.Event()
    cancel.set()

    report = manager.generate_pyramid(gradient(8, 8), 2, cancel_event=cancel)

    assert sink.calls == []
    assert report.cancelled
    assert not report.ok
    assert report.failed == []


def test_unexpected_worker_error_propagates(gradient) -> None:
    class ExplodingSink(RecordingSink):
        def write_tile(self, buffer, coordinate):  # type: ignore[no-untyped-def]
            if coordinate.level == 1:
                raise RuntimeError("boom")
            return super().write_tile(buffer, coordinate)

    manager = PyramidManager(TilingConfig(tile_size=4, level_workers=1), sink=ExplodingSink())

    with pytest.raises(RuntimeError, match="boom"):
        manager.generate_pyramid(gradient(8, 8), 2)


def test_constant_pattern_keeps_last_write(tmp_path: Path, gradient) -> None:
    manager = PyramidManager(TilingConfig(tile_size=4, pattern="tile.png", output_dir=tmp_path))

    report = manager.generate_pyramid(gradient(8, 8), 1)

    assert report.tile_count == 5
    assert [path.name for path in tmp_path.iterdir()] == ["tile.png"]
