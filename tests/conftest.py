"""Shared fixtures: real image files on disk and a loader configured for them."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.indexing import ImageLoader
from core.models.domain import DerivativeMarkers, Dimensions
from helpers import MAX_SIZE, OPT_EXT, PREV_EXT, make_image


@pytest.fixture
def markers() -> DerivativeMarkers:
    return DerivativeMarkers(optimised=OPT_EXT, preview=PREV_EXT)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A photo folder with two JPEGs and one non-image file."""

    root = tmp_path / "home"
    make_image(root / "ambience.jpg", size=(640, 480))
    make_image(root / "sunset.jpg", size=(300, 600), color=(20, 20, 200))
    (root / "notes.txt").write_text("not a photo", encoding="utf-8")
    return root


@pytest.fixture
def loader(markers: DerivativeMarkers) -> ImageLoader:
    box = Dimensions(MAX_SIZE, MAX_SIZE)
    return ImageLoader(markers=markers, optimised_size=box, preview_size=box, workers=2)
