# Path: core/models/domain.py
# Purpose: Define domain models shared across scanning, optimisation, and serving workflows.
# Layer: core/models.
# Details: Lightweight dataclasses describe photos, their derivatives, and optimiser work items.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from core.errors import CleanupError, ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dimensions:
    """Width/height pair in pixels. A zero component means "unconstrained"."""

    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class DerivativeMarkers:
    """Marker tags inserted into derivative file names.

    Two tests are provided. ``name_matches`` is the broad substring test the
    scanner uses to keep derivative output out of the index. ``is_derivative``
    is the stricter ``.<tag>.`` test applied to a path's basename, used to
    skip re-deriving a derivative and to ignore the watcher's own writes.
    """

    optimised: str
    preview: str

    def validate(self) -> None:
        """Raise ConfigError when either tag is empty (an empty tag matches every file)."""

        if not self.optimised or not self.preview:
            raise ConfigError(
                f"Optimised or preview extension is empty optimised={self.optimised!r}, preview={self.preview!r}"
            )

    def name_matches(self, name: str) -> bool:
        return self.optimised in name or self.preview in name

    def is_derivative(self, path: str | os.PathLike[str]) -> bool:
        base = os.path.basename(os.fspath(path))
        return f".{self.optimised}." in base or f".{self.preview}." in base


@dataclass(frozen=True)
class ImageEntry:
    """One logical photograph and the derivative files generated from it.

    Derivative paths are empty strings until the optimiser fills them in;
    the accessors fall back to the original so callers always get a
    servable path.
    """

    name: str
    original_path: str
    optimised_path: str = ""
    preview_path: str = ""

    def get_preview(self) -> str:
        return self.preview_path or self.original_path

    def get_full_size(self) -> str:
        return self.optimised_path or self.original_path

    def is_optimised(self) -> bool:
        return self.optimised_path != ""

    def with_derivatives(self, optimised_path: str, preview_path: str) -> "ImageEntry":
        """Return a copy of this entry carrying the given derivative paths."""

        return ImageEntry(
            name=self.name,
            original_path=self.original_path,
            optimised_path=optimised_path,
            preview_path=preview_path,
        )

    def cleanup(self) -> None:
        """Delete both derivative files.

        Both deletions are attempted even if the first fails; a single
        CleanupError describing every failure is raised afterwards. A
        derivative that is already gone counts as deleted.
        """

        failures = []
        for kind, path in (("optimised", self.optimised_path), ("preview", self.preview_path)):
            if not path:
                continue
            logger.info("removing %s file: %s", kind, os.path.normpath(path))
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as exc:
                failures.append(f"{path}: {exc}")
        if failures:
            raise CleanupError(f"failed to remove derivatives of {self.name}: " + "; ".join(failures))


@dataclass(frozen=True)
class WorkItem:
    """Job handed to an optimiser worker."""

    name: str
    entry: ImageEntry


@dataclass(frozen=True)
class WorkResult:
    """Entry produced by an optimiser worker for the job of the same name."""

    name: str
    entry: ImageEntry
