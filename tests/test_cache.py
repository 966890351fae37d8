from __future__ import annotations

import os

import pytest

from geocards.cache import ArtifactCache, ensure_cache_dir, input_baseline
from geocards.errors import ArtifactError, CacheError, InputError

from conftest import set_mtime


class Writer:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self, path) -> None:
        self.count += 1
        path.write_bytes(b"png")


@pytest.fixture
def cache(tmp_path, two_rows) -> ArtifactCache:
    directory = ensure_cache_dir(tmp_path / "cache")
    return ArtifactCache.for_input(directory, two_rows)


def test_paths_are_deterministic(cache) -> None:
    assert cache.path_for("code", "A1") == cache.path_for("code", "A1")
    assert cache.path_for("code", "A1").name == "A1-qrc.png"
    assert cache.path_for("map", "A1").name == "A1-map.png"
    assert cache.path_for("map", "A1") != cache.path_for("map", "B2")
    assert cache.path_for("map", "A1") != cache.path_for("code", "A1")


def test_unknown_kind(cache) -> None:
    with pytest.raises(ValueError):
        cache.path_for("thumbnail", "A1")


def test_missing_artifact_is_generated_then_reused(cache) -> None:
    writer = Writer()
    path = cache.resolve("code", "A1", writer)
    assert path.read_bytes() == b"png"
    assert path.stat().st_mtime_ns > cache.baseline_ns

    assert cache.resolve("code", "A1", writer) == path
    assert writer.count == 1
    assert (cache.generated, cache.reused) == (1, 1)


def test_artifact_not_newer_than_baseline_is_regenerated(cache) -> None:
    path = cache.path_for("map", "A1")
    path.write_bytes(b"old")
    stamp = cache.baseline_ns
    os.utime(path, ns=(stamp, stamp))
    assert cache.stale_reason(path) == "older than input"

    writer = Writer()
    cache.resolve("map", "A1", writer)
    assert writer.count == 1
    assert path.read_bytes() == b"png"


def test_fresh_artifact_is_left_untouched(cache) -> None:
    path = cache.path_for("map", "A1")
    path.write_bytes(b"keep")
    stamp = set_mtime(path, -10)
    assert stamp > cache.baseline_ns

    writer = Writer()
    cache.resolve("map", "A1", writer)
    assert writer.count == 0
    assert path.read_bytes() == b"keep"
    assert path.stat().st_mtime_ns == stamp


def test_force_regenerates_fresh_artifacts(tmp_path, two_rows) -> None:
    cache = ArtifactCache.for_input(ensure_cache_dir(tmp_path / "cache"), two_rows, force=True)
    path = cache.path_for("code", "A1")
    path.write_bytes(b"keep")
    set_mtime(path, -10)

    writer = Writer()
    cache.resolve("code", "A1", writer)
    assert writer.count == 1
    assert path.read_bytes() == b"png"


def test_generator_that_writes_nothing(cache) -> None:
    with pytest.raises(ArtifactError, match="nothing written"):
        cache.resolve("code", "A1", lambda path: None)


def test_generator_errors_propagate(cache) -> None:
    def explode(path):
        raise ArtifactError("boom", kind="map", identifier="A1")

    with pytest.raises(ArtifactError, match="map for A1: boom"):
        cache.resolve("map", "A1", explode)
    assert cache.generated == 0


def test_write_failure_is_cache_error(tmp_path, two_rows) -> None:
    cache = ArtifactCache.for_input(tmp_path / "missing-dir", two_rows)
    with pytest.raises(CacheError, match="cannot write"):
        cache.resolve("code", "A1", lambda path: path.write_bytes(b"x"))


def test_ensure_cache_dir_creates_tree(tmp_path) -> None:
    directory = ensure_cache_dir(tmp_path / "a" / "b")
    assert directory.is_dir()
    assert ensure_cache_dir(directory) == directory


def test_ensure_cache_dir_over_a_file(tmp_path) -> None:
    blocker = tmp_path / "cache"
    blocker.write_text("")
    with pytest.raises(CacheError):
        ensure_cache_dir(blocker)


def test_baseline_of_missing_input(tmp_path) -> None:
    with pytest.raises(InputError):
        input_baseline(tmp_path / "missing.csv")


def test_interrupted_write_is_regenerated_next_time(cache) -> None:
    def disk_full(path):
        path.write_bytes(b"\x89PNG-trunc")
        raise OSError(28, "No space left on device")

    with pytest.raises(CacheError, match="No space left on device"):
        cache.resolve("map", "A1", disk_full)
    assert list(cache.directory.iterdir()) == []

    writer = Writer()
    path = cache.resolve("map", "A1", writer)
    assert writer.count == 1
    assert path.read_bytes() == b"png"
    assert [p.name for p in cache.directory.iterdir()] == ["A1-map.png"]
