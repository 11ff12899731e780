# Path: core/indexing/loader.py
# Purpose: Combine scanning and optimisation into the load/reload operations used at startup and on change.
# Layer: core/indexing.
# Details: Wires ImageScanner, VariantGenerator, and Optimiser from application settings.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from config import AppSettings
from core.models.domain import DerivativeMarkers, Dimensions, ImageEntry

from .optimiser import Optimiser
from .resize import VariantGenerator
from .scanner import ImageScanner

logger = logging.getLogger(__name__)


class ImageLoader:
    """Build index mappings for a home folder."""

    def __init__(
        self,
        markers: DerivativeMarkers,
        optimised_size: Dimensions,
        preview_size: Dimensions,
        allowed_extensions: Optional[Iterable[str]] = None,
        workers: Optional[int] = None,
        resize_enabled: bool = True,
    ) -> None:
        self.markers = markers
        self.scanner = ImageScanner(markers, allowed_extensions)
        self.optimiser = Optimiser(VariantGenerator(markers), optimised_size, preview_size, workers=workers)
        self.resize_enabled = resize_enabled

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ImageLoader":
        resizing = settings.image_resizing
        return cls(
            markers=resizing.markers,
            optimised_size=resizing.optimised_size,
            preview_size=resizing.preview_size,
            allowed_extensions=resizing.allowed_extensions,
            workers=resizing.workers or None,
            resize_enabled=resizing.enabled,
        )

    def load_originals(self, home: Path | str) -> Dict[str, ImageEntry]:
        return self.scanner.scan(home)

    def optimise(self, entries: Dict[str, ImageEntry]) -> Dict[str, ImageEntry]:
        if not self.resize_enabled:
            return entries
        return self.optimiser.optimise_all(entries)

    def reload(self, home: Path | str) -> Dict[str, ImageEntry]:
        """Scan ``home`` and optimise the result. Scan errors propagate to the caller."""

        entries = self.load_originals(home)
        return self.optimise(entries)

    def is_derivative(self, path: str) -> bool:
        return self.markers.is_derivative(path)
