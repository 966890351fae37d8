from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping

from .errors import InputError, ParseError

log = logging.getLogger(__name__)

COLUMNS = ["number", "name", "altname", "latitude", "longitude", "comments"]
REQUIRED_COLUMNS = ["number", "latitude", "longitude"]


@dataclass(frozen=True)
class Location:
    number: str
    name: str
    altname: str
    latitude: float
    longitude: float
    comments: str


def _coordinate(row: Mapping[str, str], column: str, limit: float, row_no: int) -> float:
    raw = (row.get(column) or "").strip()
    try:
        value = float(raw)
    except ValueError as exc:
        raise ParseError(f"not a number: {raw!r}", row=row_no, column=column) from exc
    if not -limit <= value <= limit:
        raise ParseError(f"{value} outside [-{limit:g}, {limit:g}]", row=row_no, column=column)
    return value


def decode_row(row: Mapping[str, str], row_no: int) -> Location:
    number = (row.get("number") or "").strip()
    if not number:
        raise ParseError("empty identifier", row=row_no, column="number")
    if "/" in number or "\\" in number:
        raise ParseError(f"identifier {number!r} contains a path separator", row=row_no, column="number")
    if "\x00" in number:
        raise ParseError("identifier contains a NUL character", row=row_no, column="number")
    return Location(
        number=number,
        name=(row.get("name") or "").strip(),
        altname=(row.get("altname") or "").strip(),
        latitude=_coordinate(row, "latitude", 90.0, row_no),
        longitude=_coordinate(row, "longitude", 180.0, row_no),
        comments=(row.get("comments") or "").strip(),
    )


def decode_rows(header: Iterable[str] | None, rows: Iterable[Mapping[str, str]]) -> List[Location]:
    """Turn CSV rows into locations, keeping input order.

    Any bad row aborts the whole load; no partial list is returned.
    """
    present = {name.strip() for name in header or []}
    for column in REQUIRED_COLUMNS:
        if column not in present:
            raise ParseError("missing required column", column=column)

    locations: List[Location] = []
    seen = set()
    for row_no, row in enumerate(rows, start=1):
        row = {(key or "").strip(): value for key, value in row.items()}
        loc = decode_row(row, row_no)
        if loc.number in seen:
            log.warning("Duplicate identifier %s in row %d", loc.number, row_no)
        seen.add(loc.number)
        locations.append(loc)
    return locations


def load_locations(path: Path) -> List[Location]:
    log.debug("Reading file %s", path)
    try:
        with Path(path).open(newline="", encoding="utf-8-sig") as fh:
            reader = csv.DictReader(fh)
            try:
                return decode_rows(reader.fieldnames, reader)
            except csv.Error as exc:
                raise ParseError(str(exc), row=reader.line_num) from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise InputError(f"cannot open {path}: {exc.strerror or exc}") from exc
