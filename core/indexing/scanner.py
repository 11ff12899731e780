# Path: core/indexing/scanner.py
# Purpose: Scan the home folder and collect original photos keyed by logical name.
# Layer: core/indexing.
# Details: Skips derivative outputs and disallowed types; any walk error aborts the whole scan.

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from core.errors import ScanError
from core.models.domain import DerivativeMarkers, ImageEntry

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset({"png", "jpeg", "jpg", "svg", "gif"})


def file_extension(name: str) -> str:
    """Return the lower-cased text after the last dot, or '' when there is none."""

    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


class ImageScanner:
    """Scan a directory tree for original photos."""

    def __init__(
        self,
        markers: DerivativeMarkers,
        allowed_extensions: Optional[Iterable[str]] = None,
    ) -> None:
        self.markers = markers
        if allowed_extensions is None:
            self.allowed_extensions = SUPPORTED_EXTENSIONS
        else:
            self.allowed_extensions = frozenset(ext.lower().lstrip(".") for ext in allowed_extensions)

    def scan(self, root: Path | str) -> Dict[str, ImageEntry]:
        """Return a mapping of logical name to a fresh, unoptimised entry.

        When two files share a name the one visited last wins and a warning
        is logged. Raises ConfigError for empty marker tags and ScanError if
        any part of the tree cannot be read.
        """

        self.markers.validate()

        logger.info("Loading original images from %s", root)
        entries: Dict[str, ImageEntry] = {}
        for name, path in self._iter_candidates(os.fspath(root)):
            existing = entries.get(name)
            if existing is not None:
                logger.warning(
                    "duplicate filename %s: %s will be used instead of %s", name, path, existing.original_path
                )
            entries[name] = ImageEntry(name=name, original_path=path)
        return entries

    def accepts(self, name: str) -> bool:
        """Return True when a file name is an original photo of an allowed type."""

        if self.markers.name_matches(name):
            logger.debug("skipping already optimised file %s", name)
            return False
        if file_extension(name) not in self.allowed_extensions:
            logger.debug("skipping non-image file %s", name)
            return False
        return True

    def _iter_candidates(self, root: str) -> Iterator[tuple[str, str]]:
        """Yield (name, path) for every accepted regular file under root."""

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            # Deterministic visiting order makes "last visited wins" reproducible.
            dirnames.sort()
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if os.path.islink(path) or not os.path.isfile(path):
                    continue
                if self.accepts(name):
                    yield name, path


def _raise_walk_error(error: OSError) -> None:
    raise ScanError(f"failed to scan {error.filename}: {error.strerror or error}") from error
