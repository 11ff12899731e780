"""Tests for core.indexing.optimiser and ImageLoader."""

from __future__ import annotations

import os
from unittest import mock

from PIL import Image

from core.indexing import ImageLoader
from core.indexing.optimiser import Optimiser
from core.indexing.resize import VariantGenerator
from core.models.domain import Dimensions, ImageEntry
from helpers import MAX_SIZE, files_with, make_image


def test_optimise_all_fills_in_both_derivatives(home, loader):
    entries = loader.load_originals(home)

    result = loader.optimise(entries)

    assert result is entries
    assert len(result) == 2
    for name, entry in result.items():
        stem, ext = os.path.splitext(entry.original_path)
        assert entry.is_optimised()
        assert entry.optimised_path == f"{stem}.opt{ext}"
        assert entry.preview_path == f"{stem}.prev{ext}"
        assert entry.get_preview() != entry.get_full_size()
        assert os.path.isfile(entry.optimised_path)
        assert os.path.isfile(entry.preview_path)
        with Image.open(entry.preview_path) as image:
            assert max(image.size) == MAX_SIZE


def test_two_jpegs_produce_exactly_two_derivatives_of_each_kind(home, loader):
    entries = loader.reload(home)

    assert len(entries) == 2
    assert len(files_with(home, "*.opt.jpg")) == 2
    assert len(files_with(home, "*.prev.jpg")) == 2


def test_reload_of_an_unchanged_folder_reuses_derivatives(home, loader):
    first = loader.reload(home)
    mtimes = {p: p.stat().st_mtime_ns for p in files_with(home, "*.*.jpg")}

    second = loader.reload(home)

    assert second == first
    assert len(files_with(home, "*.opt.jpg")) == 2
    assert len(files_with(home, "*.prev.jpg")) == 2
    assert {p: p.stat().st_mtime_ns for p in files_with(home, "*.*.jpg")} == mtimes


def test_cleanup_after_optimise_restores_the_original_scan(home, loader):
    before = loader.load_originals(home)
    optimised = loader.reload(home)

    for entry in optimised.values():
        entry.cleanup()

    assert files_with(home, "*.opt.*") == []
    assert files_with(home, "*.prev.*") == []
    assert len(loader.load_originals(home)) == len(before)


def test_variants_derive_from_the_original_even_for_optimised_entries(home, loader):
    entries = loader.reload(home)

    again = loader.optimise(dict(entries))

    assert again == entries
    assert files_with(home, "*.opt.prev.jpg") == []


def test_failed_item_keeps_empty_derivatives_and_batch_continues(home, loader, markers):
    (home / "broken.jpg").write_bytes(b"garbage")

    entries = loader.reload(home)

    assert len(entries) == 3
    broken = entries["broken.jpg"]
    assert not broken.is_optimised()
    assert broken.get_preview() == broken.get_full_size() == broken.original_path
    assert entries["ambience.jpg"].is_optimised()


def test_unexpected_worker_exception_returns_the_original_entry(home, markers, caplog):
    optimiser = Optimiser(VariantGenerator(markers), Dimensions(50, 50), Dimensions(20, 20), workers=3)
    entries = {"x.jpg": ImageEntry("x.jpg", str(home / "ambience.jpg"))}

    with mock.patch.object(VariantGenerator, "derive", side_effect=RuntimeError("boom")):
        result = optimiser.optimise_all(entries)

    assert result["x.jpg"] == ImageEntry("x.jpg", str(home / "ambience.jpg"))
    assert "failed to optimise x.jpg" in caplog.text


def test_many_entries_with_few_workers(tmp_path, markers):
    for index in range(12):
        make_image(tmp_path / f"img{index:02d}.png", size=(60, 40))
    loader = ImageLoader(markers, Dimensions(30, 30), Dimensions(10, 10), workers=3)

    entries = loader.reload(tmp_path)

    assert len(entries) == 12
    assert all(entry.is_optimised() for entry in entries.values())
    assert len(files_with(tmp_path, "*.opt.png")) == 12
    assert len(files_with(tmp_path, "*.prev.png")) == 12


def test_empty_mapping_is_returned_unchanged(markers):
    optimiser = Optimiser(VariantGenerator(markers), Dimensions(10, 10), Dimensions(5, 5))

    assert optimiser.optimise_all({}) == {}


def test_worker_count_defaults_to_cpu_count(markers):
    with mock.patch("os.cpu_count", return_value=7):
        optimiser = Optimiser(VariantGenerator(markers), Dimensions(10, 10), Dimensions(5, 5))

    assert optimiser.workers == 7


def test_disabled_resizing_only_scans(home, markers):
    loader = ImageLoader(markers, Dimensions(10, 10), Dimensions(5, 5), resize_enabled=False)

    entries = loader.reload(home)

    assert len(entries) == 2
    assert not any(entry.is_optimised() for entry in entries.values())
    assert files_with(home, "*.opt.*") == []
