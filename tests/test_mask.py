"""Tests for color-keyed mask extraction."""

from __future__ import annotations

import numpy as np
import pytest

from posecanvas.canvas.image_file import encode_png
from posecanvas.canvas.mask import (
    extract_mask,
    extract_mask_image,
    is_binary_mask,
    painted_pixels,
)
from tests.helpers import read_pixels


def _overlay(h: int = 4, w: int = 4) -> np.ndarray:
    return np.zeros((h, w, 4), dtype=np.uint8)


class TestExtractMask:
    """Tests for per-pixel classification."""

    def test_pink_paint_becomes_white(self):
        """Test that translucent pink paint maps to opaque white."""
        overlay = _overlay()
        overlay[1, 2] = (255, 143, 171, 178)
        mask = extract_mask(overlay)
        assert tuple(mask[1, 2]) == (255, 255, 255, 255)
        assert tuple(mask[0, 0]) == (0, 0, 0, 255)

    def test_threshold_is_strict(self):
        """Test that red exactly at the threshold is not painted."""
        overlay = _overlay()
        overlay[0, 0] = (100, 0, 0, 255)
        overlay[0, 1] = (101, 0, 0, 255)
        mask = extract_mask(overlay)
        assert tuple(mask[0, 0]) == (0, 0, 0, 255)
        assert tuple(mask[0, 1]) == (255, 255, 255, 255)

    def test_transparent_red_is_not_painted(self):
        """Test that zero alpha never counts as paint."""
        overlay = _overlay()
        overlay[2, 2] = (255, 0, 0, 0)
        assert not extract_mask(overlay)[:, :, 0].any()

    def test_faint_paint_edge_is_painted(self):
        """Test that a faint brush edge is classified on straight red, not flattened."""
        overlay = _overlay()
        overlay[0, 0] = (255, 143, 171, 10)
        overlay[0, 1] = (255, 143, 171, 178)
        assert tuple(extract_mask(overlay)[0, 0]) == (255, 255, 255, 255)

        strict = extract_mask(overlay, min_alpha=101)
        assert tuple(strict[0, 0]) == (0, 0, 0, 255)
        assert tuple(strict[0, 1]) == (255, 255, 255, 255)

    def test_blank_overlay_gives_all_black(self):
        """Test that an unpainted overlay is a valid all-black mask."""
        mask = extract_mask(_overlay(8, 5))
        assert mask.shape == (8, 5, 4)
        assert (mask[:, :, :3] == 0).all()
        assert (mask[:, :, 3] == 255).all()

    def test_output_alpha_always_opaque(self):
        """Test that output alpha is forced to 255."""
        overlay = np.random.default_rng(3).integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
        assert (extract_mask(overlay)[:, :, 3] == 255).all()

    def test_idempotent_on_binary_mask(self):
        """Test that extracting a mask again changes nothing."""
        overlay = np.random.default_rng(7).integers(0, 256, size=(20, 30, 4), dtype=np.uint8)
        once = extract_mask(overlay)
        assert is_binary_mask(once)
        assert np.array_equal(extract_mask(once), once)

    def test_deterministic(self):
        """Test that repeated extraction gives byte-identical PNGs."""
        overlay = np.random.default_rng(11).integers(0, 256, size=(12, 12, 4), dtype=np.uint8)
        first = encode_png(extract_mask(overlay))
        second = encode_png(extract_mask(overlay))
        assert first.data == second.data

    def test_custom_threshold(self):
        """Test that the red threshold is a parameter."""
        overlay = _overlay()
        overlay[0, 0] = (150, 0, 0, 255)
        assert tuple(extract_mask(overlay, red_threshold=200)[0, 0]) == (0, 0, 0, 255)

    def test_key_color(self):
        """Test keying on an explicit paint color with tolerance."""
        overlay = _overlay()
        overlay[0, 0] = (0, 250, 5, 255)
        overlay[0, 1] = (255, 0, 0, 255)
        painted = painted_pixels(overlay, key_color=(0, 255, 0), tolerance=6)
        assert painted[0, 0]
        assert not painted[0, 1]

    def test_rejects_non_rgba(self):
        """Test that a 3-channel array is rejected."""
        with pytest.raises(ValueError):
            extract_mask(np.zeros((4, 4, 3), dtype=np.uint8))


class TestExtractMaskImage:
    """Tests for the ImageFile wrapper."""

    def test_round_trip_dimensions(self):
        """Test that the mask PNG has the overlay's dimensions."""
        overlay = _overlay(9, 13)
        overlay[4, 6] = (255, 143, 171, 178)
        mask_file = extract_mask_image(encode_png(overlay))
        assert mask_file.mime_type == "image/png"
        pixels = read_pixels(mask_file)
        assert pixels.shape == (9, 13, 4)
        assert tuple(pixels[4, 6]) == (255, 255, 255, 255)
        assert int((pixels[:, :, 0] == 255).sum()) == 1
