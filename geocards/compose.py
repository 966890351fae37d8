"""Card layout: one landscape page per location.

Each page carries a label block rotated 90 degrees up the left edge
(identifier, name, coordinates and QR code) and the map raster to its
right. The map is drawn last so it covers the part of the QR block that
runs under it.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .config import (
    CODE_TOP_LEFT,
    COORDS_COLOR,
    COORDS_FONT_SIZE,
    COORDS_POS,
    LABEL_PIVOT,
    LABEL_ROTATION,
    MAP_HEIGHT,
    MAP_POS,
    NAME_FONT_SIZE,
    NAME_GAP,
    NUMBER_FONT_SIZE,
    NUMBER_POS,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    TEXT_COLOR,
    RunConfig,
)
from .errors import ArtifactError, InputError
from .records import Location

log = logging.getLogger(__name__)


def transliterate(text: str, encoding: str) -> str:
    """Reduce ``text`` to what the single-byte ``encoding`` can carry."""
    return text.encode(encoding, errors="replace").decode(encoding)


def coordinate_label(loc: Location) -> str:
    return f"{loc.latitude:f} N, {loc.longitude:f} E"


def register_font(config: RunConfig) -> str:
    name = config.resolved_font_name
    if config.font_path is None:
        return name
    if name not in pdfmetrics.getRegisteredFontNames():
        try:
            pdfmetrics.registerFont(TTFont(name, str(config.font_path)))
        except Exception as exc:
            raise InputError(f"cannot load font {config.font_path}: {exc}") from exc
    return name


class CardDocument:
    """Accumulates card pages in memory until :meth:`getvalue` is called."""

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.font = register_font(config)
        self.encoding = config.resolved_encoding
        self.pages = 0
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(PAGE_WIDTH * mm, PAGE_HEIGHT * mm),
            invariant=1,
        )

    def add_page(self, loc: Location, code_path: Path, map_path: Path) -> None:
        c = self._canvas
        if loc.name or not self.config.skip_unnamed_labels:
            self._draw_label(loc, code_path)
        else:
            log.debug("No name for %s, leaving label block out", loc.number)

        map_image = self._image(map_path, "map", loc)
        map_w, map_h = map_image.getSize()
        height = MAP_HEIGHT * mm
        width = height * map_w / map_h
        c.drawImage(map_image, MAP_POS[0] * mm, MAP_POS[1] * mm, width=width, height=height)
        log.debug("Added map %s", map_path)

        c.showPage()
        self.pages += 1

    def _draw_label(self, loc: Location, code_path: Path) -> None:
        c = self._canvas
        c.saveState()
        c.translate(LABEL_PIVOT[0] * mm, LABEL_PIVOT[1] * mm)
        c.rotate(LABEL_ROTATION)

        number = transliterate(loc.number, self.encoding)
        c.setFont(self.font, NUMBER_FONT_SIZE)
        c.setFillColorRGB(*TEXT_COLOR)
        c.drawString(NUMBER_POS[0] * mm, NUMBER_POS[1] * mm, number)
        number_w = c.stringWidth(number, self.font, NUMBER_FONT_SIZE)

        c.setFont(self.font, NAME_FONT_SIZE)
        c.drawString(
            NUMBER_POS[0] * mm + number_w + NAME_GAP * mm,
            NUMBER_POS[1] * mm,
            transliterate(loc.name, self.encoding),
        )

        c.setFont(self.font, COORDS_FONT_SIZE)
        c.setFillColorRGB(*COORDS_COLOR)
        c.drawString(COORDS_POS[0] * mm, COORDS_POS[1] * mm, coordinate_label(loc))

        # 1 px = 1 pt, the raster's natural size at 72 dpi
        code_image = self._image(code_path, "code", loc)
        code_w, code_h = code_image.getSize()
        c.drawImage(
            code_image,
            CODE_TOP_LEFT[0] * mm,
            CODE_TOP_LEFT[1] * mm - code_h,
            width=code_w,
            height=code_h,
        )
        c.restoreState()

    @staticmethod
    def _image(path: Path, kind: str, loc: Location) -> ImageReader:
        try:
            return ImageReader(str(path))
        except Exception as exc:
            raise ArtifactError(f"unreadable image {path}: {exc}", kind=kind, identifier=loc.number) from exc

    def getvalue(self) -> bytes:
        """Finish the document and return the PDF bytes."""
        self._canvas.save()
        return self._buffer.getvalue()
