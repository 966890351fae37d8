"""On-disk cache for the per-location raster artifacts.

An artifact is reused when its file is newer than the input dataset (the
baseline). This is a file-level timestamp policy, not content addressing:
touching the input without changing it invalidates every artifact, and an
artifact written after an edit stays valid even if the edit changed its
record.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from .errors import ArtifactError, CacheError, InputError

log = logging.getLogger(__name__)

ARTIFACT_SUFFIXES = {
    "code": "qrc",
    "map": "map",
}


def input_baseline(path: Path) -> int:
    """Modification time of the input file in nanoseconds."""
    try:
        return Path(path).stat().st_mtime_ns
    except OSError as exc:
        raise InputError(f"cannot stat {path}: {exc.strerror or exc}") from exc


class ArtifactCache:
    def __init__(self, directory: Path, baseline_ns: int, force: bool = False) -> None:
        self.directory = Path(directory)
        self.baseline_ns = baseline_ns
        self.force = force
        self.generated = 0
        self.reused = 0

    @classmethod
    def for_input(cls, directory: Path, input_path: Path, force: bool = False) -> "ArtifactCache":
        return cls(directory, input_baseline(input_path), force=force)

    def path_for(self, kind: str, identifier: str) -> Path:
        try:
            suffix = ARTIFACT_SUFFIXES[kind]
        except KeyError:
            raise ValueError(f"Unknown artifact kind '{kind}'") from None
        return self.directory / f"{identifier}-{suffix}.png"

    def stale_reason(self, path: Path) -> str | None:
        """Why ``path`` must be regenerated, or None when it is fresh."""
        if self.force:
            return "forced"
        try:
            mtime_ns = path.stat().st_mtime_ns
        except FileNotFoundError:
            return "missing"
        except OSError as exc:
            raise CacheError(f"cannot stat {path}: {exc.strerror or exc}") from exc
        if mtime_ns <= self.baseline_ns:
            return "older than input"
        return None

    def resolve(self, kind: str, identifier: str, generate: Callable[[Path], None]) -> Path:
        """Return the artifact path, regenerating it when it is not fresh.

        ``generate`` writes to a scratch path beside the target, which is
        moved into place only once the write has succeeded.
        """
        path = self.path_for(kind, identifier)
        reason = self.stale_reason(path)
        if reason is None:
            log.debug("Using existing %s file %s", kind, path)
            self.reused += 1
            return path

        log.debug("Creating new %s file %s (%s)", kind, path, reason)
        # the target only ever holds a complete artifact
        partial = path.with_name(f".{path.stem}.partial{path.suffix}")
        try:
            try:
                generate(partial)
            except OSError as exc:
                raise CacheError(f"cannot write {path}: {exc.strerror or exc}") from exc
            if not partial.is_file():
                raise ArtifactError(f"nothing written to {path}", kind=kind, identifier=identifier)
            try:
                os.replace(partial, path)
            except OSError as exc:
                raise CacheError(f"cannot write {path}: {exc.strerror or exc}") from exc
        finally:
            partial.unlink(missing_ok=True)
        self.generated += 1
        return path


def ensure_cache_dir(directory: Path) -> Path:
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheError(f"cannot create {directory}: {exc.strerror or exc}") from exc
    return Path(directory)
