from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# --- Input & output --------------------------------------------------------
DEFAULT_OUTPUT = Path("output.pdf")  # written when --out is not given
DEFAULT_CACHE_DIR = Path("cache")  # generated QR and map rasters
API_KEY_ENV = "THUNDERFOREST_API_KEY"  # fallback for --api-key

# --- Page geometry (mm) ----------------------------------------------------
PAGE_WIDTH = 148.0  # landscape card width
PAGE_HEIGHT = 105.0  # landscape card height
LABEL_PIVOT = (5.0, 5.0)  # rotation pivot measured from bottom-left corner
LABEL_ROTATION = 90.0  # counter-clockwise, degrees
NUMBER_POS = (0.0, -10.0)  # identifier baseline inside rotated frame
NAME_GAP = 4.0  # space between identifier and name
COORDS_POS = (0.0, -17.0)  # coordinate line baseline inside rotated frame
CODE_TOP_LEFT = (PAGE_HEIGHT - 32.0, 6.0)  # QR corner inside rotated frame
MAP_POS = (25.0, 5.0)  # map bottom-left corner on the page
MAP_HEIGHT = PAGE_HEIGHT - 10.0  # map width follows the raster aspect ratio

# --- Typography ------------------------------------------------------------
DEFAULT_FONT = "Helvetica"  # used when no TTF file is configured
NUMBER_FONT_SIZE = 40.0
NAME_FONT_SIZE = 20.0
COORDS_FONT_SIZE = 15.0
TEXT_COLOR = (0.0, 0.0, 0.0)
COORDS_COLOR = (150 / 255, 150 / 255, 150 / 255)
TTF_ENCODING = "cp874"  # single-byte Thai code page for TTF fonts
BUILTIN_ENCODING = "cp1252"  # what the standard Type 1 fonts can show

# --- Artifacts -------------------------------------------------------------
CODE_SIZE = 100  # QR raster edge in pixels (placed at 1 px = 1 pt)
MAP_SIZE = (640, 513)  # map raster width, height in pixels
DEFAULT_TILE_PROVIDER = "thunderforest-outdoors"

# --- Markers ---------------------------------------------------------------
RGBA = Tuple[int, int, int, int]
RED: RGBA = (0xFF, 0x00, 0x00, 0xFF)
BLUE: RGBA = (0x00, 0x00, 0xFF, 0xFF)
MARKER_SIZE = 16


@dataclass(frozen=True)
class Marker:
    latitude: float
    longitude: float
    color: RGBA = BLUE
    size: int = MARKER_SIZE


DEFAULT_REFERENCE_MARKERS: Tuple[Marker, ...] = (Marker(19.89830, 99.81805),)


@dataclass(frozen=True)
class RunConfig:
    """Everything one run needs, built once by the CLI and passed down."""

    input_path: Path
    output_path: Path = DEFAULT_OUTPUT
    cache_dir: Path = DEFAULT_CACHE_DIR
    debug: bool = False
    force: bool = False
    font_path: Path | None = None
    font_name: str | None = None
    text_encoding: str | None = None
    tile_provider: str = DEFAULT_TILE_PROVIDER
    api_key: str | None = None
    target_color: RGBA = RED
    target_size: int = MARKER_SIZE
    reference_markers: Tuple[Marker, ...] = field(default=DEFAULT_REFERENCE_MARKERS)
    skip_unnamed_labels: bool = False
    code_size: int = CODE_SIZE
    map_size: Tuple[int, int] = MAP_SIZE

    @property
    def resolved_font_name(self) -> str:
        if self.font_path is None:
            return DEFAULT_FONT
        return self.font_name or Path(self.font_path).stem

    @property
    def resolved_encoding(self) -> str:
        if self.text_encoding:
            return self.text_encoding
        return TTF_ENCODING if self.font_path is not None else BUILTIN_ENCODING
