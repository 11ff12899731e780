# Path: core/indexing/resize.py
# Purpose: Produce resized derivative files for original photos.
# Layer: core/indexing.
# Details: Derivative names are deterministic, existing files are reused, and failures degrade to the original.

from __future__ import annotations

import logging
import os
from typing import Optional

from PIL import Image

from core.models.domain import DerivativeMarkers, Dimensions

logger = logging.getLogger(__name__)

# Below this size on either axis, nearest-neighbour output looks visibly poor.
QUALITY_FILTER_THRESHOLD = 1000

_SAVE_OPTIONS = {
    "JPEG": {"quality": 90, "optimize": True},
    "PNG": {"optimize": True},
}
_RGB_ONLY_FORMATS = {"JPEG"}


def calculate_dimensions(source: Dimensions, maximum: Dimensions) -> Dimensions:
    """Fit ``source`` inside ``maximum`` preserving aspect ratio.

    A zero component of ``maximum`` leaves that axis unconstrained. The
    result is floored and never smaller than 1px on either axis.
    """

    max_width = maximum.width or source.width
    max_height = maximum.height or source.height

    ratio = min(max_width / source.width, max_height / source.height)

    return Dimensions(
        width=max(1, int(source.width * ratio)),
        height=max(1, int(source.height * ratio)),
    )


def choose_filter(size: Dimensions) -> Image.Resampling:
    """Pick the resampling filter for an output of the given size."""

    if size.width < QUALITY_FILTER_THRESHOLD or size.height < QUALITY_FILTER_THRESHOLD:
        return Image.Resampling.BICUBIC
    return Image.Resampling.NEAREST


def resize(image: Image.Image, maximum: Dimensions) -> Image.Image:
    """Return ``image`` scaled to fit within ``maximum``."""

    target = calculate_dimensions(Dimensions(*image.size), maximum)
    return image.resize((target.width, target.height), choose_filter(target))


def save(image: Image.Image, output_path: str) -> None:
    """Write ``image`` to ``output_path`` without ever exposing a partial file.

    The format is chosen from the output's extension. The image is written
    to a sibling file that still carries the marker tag in its name and is
    then renamed into place.
    """

    fmt = Image.registered_extensions().get(os.path.splitext(output_path)[1].lower())
    if fmt is None:
        raise ValueError(f"unknown image format for {output_path}")
    if fmt in _RGB_ONLY_FORMATS and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    partial_path = output_path + ".part"
    try:
        image.save(partial_path, format=fmt, **_SAVE_OPTIONS.get(fmt, {}))
        os.replace(partial_path, output_path)
    finally:
        if os.path.exists(partial_path):
            os.remove(partial_path)


class VariantGenerator:
    """Derive resized variants of original photos next to the originals."""

    def __init__(self, markers: DerivativeMarkers) -> None:
        self.markers = markers

    def output_path(self, input_path: str, tag: str) -> str:
        """Return the derivative path for ``input_path``: ``photo.jpg`` -> ``photo.<tag>.jpg``.

        Paths that already are derivatives are returned unchanged.
        """

        if self.markers.is_derivative(input_path):
            return input_path
        stem, ext = os.path.splitext(input_path)
        return f"{stem}.{tag}{ext}"

    def derive(self, input_path: str, tag: str, maximum: Dimensions) -> str:
        """Return the path of the ``tag`` variant of ``input_path``, creating it if absent.

        Never raises for image or filesystem problems: the failure is logged
        and ``input_path`` is returned so the original can still be served.
        """

        output_path = self.output_path(input_path, tag)
        if os.path.exists(output_path):
            logger.debug("resized image already exists, skipping %s", os.path.normpath(output_path))
            return output_path

        logger.info("resizing image (%s) %s", tag, os.path.normpath(output_path))
        resized: Optional[Image.Image] = None
        try:
            with Image.open(input_path) as image:
                resized = resize(image, maximum)
            save(resized, output_path)
        except Exception as exc:
            logger.error("error resizing %s: %s", input_path, exc)
            return input_path
        finally:
            if resized is not None:
                resized.close()
        return output_path
