"""Printable location cards with a QR code and a map per location."""

from .config import Marker, RunConfig
from .errors import (
    ArtifactError,
    CacheError,
    GeocardsError,
    InputError,
    OutputError,
    ParseError,
)
from .pipeline import RunSummary, run
from .records import Location, load_locations

__all__ = [
    "ArtifactError",
    "CacheError",
    "GeocardsError",
    "InputError",
    "Location",
    "Marker",
    "OutputError",
    "ParseError",
    "RunConfig",
    "RunSummary",
    "load_locations",
    "run",
]

__version__ = "0.1.0"
