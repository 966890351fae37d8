"""Failure types raised by the card pipeline.

Every component raises one of these; nothing is recovered locally. The CLI
turns them into a single diagnostic line and a non-zero exit status.
"""

from __future__ import annotations


class GeocardsError(Exception):
    """Base class for all pipeline failures."""

    operation = "run"

    def describe(self) -> str:
        return f"{self.operation}: {self}"


class InputError(GeocardsError):
    operation = "read input"


class ParseError(InputError):
    operation = "parse input"

    def __init__(self, message: str, row: int | None = None, column: str | None = None) -> None:
        self.row = row
        self.column = column
        where = []
        if row is not None:
            where.append(f"row {row}")
        if column is not None:
            where.append(f"column '{column}'")
        if where:
            message = f"{', '.join(where)}: {message}"
        super().__init__(message)


class CacheError(GeocardsError):
    operation = "artifact cache"


class ArtifactError(GeocardsError):
    operation = "generate artifact"

    def __init__(self, message: str, kind: str | None = None, identifier: str | None = None) -> None:
        self.kind = kind
        self.identifier = identifier
        if kind is not None and identifier is not None:
            message = f"{kind} for {identifier}: {message}"
        super().__init__(message)


class OutputError(GeocardsError):
    operation = "write output"
