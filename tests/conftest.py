from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Callable, List

import pytest
from PIL import Image

from geocards.config import RunConfig
from geocards.records import Location

HEADER = "number,name,altname,latitude,longitude,comments\n"
SECOND = 1_000_000_000


def set_mtime(path: Path, offset_s: float) -> int:
    """Move ``path``'s mtime to now + ``offset_s`` and return it in ns."""
    stamp = time.time_ns() + int(offset_s * SECOND)
    os.utime(path, ns=(stamp, stamp))
    return stamp


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    def _write(body: str, name: str = "locations.csv", age_s: float = 100.0) -> Path:
        path = tmp_path / name
        path.write_text(HEADER + body, encoding="utf-8")
        set_mtime(path, -age_s)
        return path

    return _write


@pytest.fixture
def two_rows(write_csv) -> Path:
    return write_csv("A1,Ban Nong,,19.9,99.8,\nB2,Doi Chang,alt,20.1,100.0,note\n")


class FakeMapWriter:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def __call__(self, loc: Location, path: Path, config: RunConfig) -> None:
        self.calls.append(loc.number)
        width, height = config.map_size
        Image.new("RGB", (width, height), (200, 220, 200)).save(path, format="PNG")


@pytest.fixture
def fake_map() -> FakeMapWriter:
    return FakeMapWriter()


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., RunConfig]:
    def _make(input_path: Path, **overrides) -> RunConfig:
        values = dict(
            input_path=input_path,
            output_path=tmp_path / "output.pdf",
            cache_dir=tmp_path / "cache",
        )
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def location() -> Location:
    return Location("A1", "Ban Nong", "", 19.9, 99.8, "")
