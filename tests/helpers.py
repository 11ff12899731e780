"""Helpers for building photo folders in tests."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

OPT_EXT = "opt"
PREV_EXT = "prev"
MAX_SIZE = 200


def make_image(path: Path, size=(400, 300), color=(200, 30, 30), mode="RGB") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


def files_with(root: Path, pattern: str) -> list[Path]:
    return sorted(root.rglob(pattern))
