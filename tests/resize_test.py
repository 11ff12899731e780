"""Tests for core.indexing.resize."""

from __future__ import annotations

import os

import pytest
from PIL import Image

from core.indexing.resize import VariantGenerator, calculate_dimensions, choose_filter
from core.models.domain import Dimensions
from helpers import make_image


@pytest.mark.parametrize(
    "source, maximum, expected",
    [
        (Dimensions(400, 300), Dimensions(200, 200), Dimensions(200, 150)),
        (Dimensions(300, 600), Dimensions(200, 200), Dimensions(100, 200)),
        (Dimensions(400, 300), Dimensions(0, 0), Dimensions(400, 300)),
        (Dimensions(400, 300), Dimensions(100, 0), Dimensions(100, 75)),
        (Dimensions(400, 300), Dimensions(0, 150), Dimensions(200, 150)),
        (Dimensions(5000, 10), Dimensions(100, 100), Dimensions(100, 1)),
        (Dimensions(1000, 3), Dimensions(10, 10), Dimensions(10, 1)),
    ],
)
def test_calculate_dimensions(source, maximum, expected):
    assert calculate_dimensions(source, maximum) == expected


def test_small_outputs_use_the_quality_filter():
    assert choose_filter(Dimensions(200, 150)) == Image.Resampling.BICUBIC
    assert choose_filter(Dimensions(1920, 999)) == Image.Resampling.BICUBIC
    assert choose_filter(Dimensions(1920, 1080)) == Image.Resampling.NEAREST


def test_output_path_inserts_the_tag_before_the_extension(markers):
    generator = VariantGenerator(markers)

    assert generator.output_path("/photos/2024.06/photo.jpg", "opt") == "/photos/2024.06/photo.opt.jpg"
    assert generator.output_path("/photos/photo.opt.jpg", "prev") == "/photos/photo.opt.jpg"


def test_derive_writes_a_resized_copy(tmp_path, markers):
    source = make_image(tmp_path / "photo.jpg", size=(400, 300))

    output = VariantGenerator(markers).derive(str(source), "opt", Dimensions(200, 200))

    assert output == str(tmp_path / "photo.opt.jpg")
    with Image.open(output) as image:
        assert image.size == (200, 150)
    assert not os.path.exists(output + ".part")


def test_derive_reuses_an_existing_derivative(tmp_path, markers):
    source = make_image(tmp_path / "photo.jpg", size=(400, 300))
    existing = make_image(tmp_path / "photo.opt.jpg", size=(10, 10))
    mtime = existing.stat().st_mtime_ns

    output = VariantGenerator(markers).derive(str(source), "opt", Dimensions(200, 200))

    assert output == str(existing)
    assert existing.stat().st_mtime_ns == mtime
    with Image.open(output) as image:
        assert image.size == (10, 10)


def test_derive_does_not_derive_from_a_derivative(tmp_path, markers):
    derivative = make_image(tmp_path / "photo.opt.jpg")

    output = VariantGenerator(markers).derive(str(derivative), "prev", Dimensions(50, 50))

    assert output == str(derivative)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["photo.opt.jpg"]


def test_derive_falls_back_to_the_input_on_failure(tmp_path, markers, caplog):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not really a jpeg")

    with caplog.at_level("ERROR"):
        output = VariantGenerator(markers).derive(str(broken), "opt", Dimensions(200, 200))

    assert output == str(broken)
    assert not (tmp_path / "broken.opt.jpg").exists()
    assert not (tmp_path / "broken.opt.jpg.part").exists()
    assert "error resizing" in caplog.text


def test_derive_converts_images_the_target_format_cannot_store(tmp_path, markers):
    source = tmp_path / "alpha.jpeg"
    Image.new("RGBA", (300, 300), (0, 0, 0, 0)).save(tmp_path / "alpha.png")
    (tmp_path / "alpha.png").rename(source)

    output = VariantGenerator(markers).derive(str(source), "prev", Dimensions(100, 100))

    assert output == str(tmp_path / "alpha.prev.jpeg")
    with Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"
        assert image.size == (100, 100)


def test_derive_keeps_png_format(tmp_path, markers):
    source = make_image(tmp_path / "shot.png", size=(50, 80), mode="RGBA", color=(1, 2, 3, 255))

    output = VariantGenerator(markers).derive(str(source), "prev", Dimensions(0, 40))

    with Image.open(output) as image:
        assert image.format == "PNG"
        assert image.size == (25, 40)
