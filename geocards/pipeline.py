from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .cache import ArtifactCache, ensure_cache_dir
from .compose import CardDocument
from .config import RunConfig
from .errors import OutputError
from .maps import get_map_image, write_map_image
from .qrcodes import get_code_image, write_code_image
from .records import load_locations

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    pages: int
    generated: int
    reused: int
    output_path: Path


def current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_atomically(path: Path, payload: bytes) -> None:
    """Replace ``path`` with ``payload`` so readers never see a partial file."""
    path = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise OutputError(f"cannot write {path}: {exc.strerror or exc}") from exc
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
        os.chmod(tmp_name, 0o666 & ~current_umask())
        os.replace(tmp_name, path)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise OutputError(f"cannot write {path}: {exc.strerror or exc}") from exc


def run(config: RunConfig, code_writer=write_code_image, map_writer=write_map_image) -> RunSummary:
    """Build the card document for ``config.input_path``.

    The first failure propagates; the output file is only written once
    every page has been composed.
    """
    ensure_cache_dir(config.cache_dir)
    cache = ArtifactCache.for_input(config.cache_dir, config.input_path, force=config.force)

    locations = load_locations(config.input_path)
    log.info("Processing %d locations", len(locations))

    document = CardDocument(config)
    for loc in locations:
        log.info("Processing map number %s %s", loc.number, loc.name)
        code_path = get_code_image(loc, cache, config, writer=code_writer)
        map_path = get_map_image(loc, cache, config, writer=map_writer)
        document.add_page(loc, code_path, map_path)

    write_atomically(config.output_path, document.getvalue())
    log.info(
        "Wrote %s with %d pages (%d artifacts generated, %d reused)",
        config.output_path,
        document.pages,
        cache.generated,
        cache.reused,
    )
    return RunSummary(document.pages, cache.generated, cache.reused, Path(config.output_path))
