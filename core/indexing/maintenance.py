# Path: core/indexing/maintenance.py
# Purpose: Offline housekeeping for derivative files under a home folder.
# Layer: core/indexing.
# Details: Used by the cleanup helper command; independent of any published index.

from __future__ import annotations

import logging
import os
from pathlib import Path

from core.errors import ScanError
from core.models.domain import DerivativeMarkers

logger = logging.getLogger(__name__)


def remove_derivatives(root: Path | str, markers: DerivativeMarkers) -> int:
    """Delete every derivative file under ``root`` and return how many were removed.

    A file that cannot be removed is logged and skipped. A directory that
    cannot be listed aborts the walk with ScanError.
    """

    markers.validate()

    def _on_error(error: OSError) -> None:
        raise ScanError(f"failed to walk {error.filename}: {error.strerror or error}") from error

    removed = 0
    for dirpath, _dirnames, filenames in os.walk(os.fspath(root), onerror=_on_error):
        for name in filenames:
            if not markers.is_derivative(name):
                continue
            path = os.path.join(dirpath, name)
            logger.info("removing file: %s", path)
            try:
                os.remove(path)
            except OSError as exc:
                logger.error("failed to remove %s: %s", path, exc)
                continue
            removed += 1
    return removed
