from __future__ import annotations

import logging
from pathlib import Path

import qrcode
from PIL import Image

from .cache import ArtifactCache
from .config import RunConfig
from .errors import ArtifactError
from .records import Location

log = logging.getLogger(__name__)

ERROR_CORRECTION = qrcode.constants.ERROR_CORRECT_M


def geo_uri(latitude: float, longitude: float) -> str:
    return f"geo:{latitude:f},{longitude:f}"


def write_code_image(loc: Location, path: Path, config: RunConfig) -> None:
    """Encode the location's geo URI as a square QR PNG at ``path``."""
    uri = geo_uri(loc.latitude, loc.longitude)
    try:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECTION, border=4)
        qr.add_data(uri)
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    except (ValueError, qrcode.exceptions.DataOverflowError) as exc:
        raise ArtifactError(f"QR encoding failed: {exc}", kind="code", identifier=loc.number) from exc
    size = config.code_size
    image = image.resize((size, size), Image.NEAREST)
    image.save(path, format="PNG")


def get_code_image(loc: Location, cache: ArtifactCache, config: RunConfig, writer=write_code_image) -> Path:
    log.debug("Getting QR code for %s", loc.number)
    return cache.resolve("code", loc.number, lambda path: writer(loc, path, config))
