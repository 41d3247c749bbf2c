"""
Unit tests for aspect ratio restoration.

These work on rectangles only; no images are decoded.
"""

import numpy as np
import pytest

from cpar.errors import GeometryError
from cpar.image.aspect_restorer import AspectRestorer, fit_aspect, is_satisfied
from cpar.models.crop import CropRect


class TestRestore:
    """Test AspectRestorer.restore."""

    def test_central_content_scenario(self):
        """Test 600x500 content in a 1000x800 scan grows to ratio 1.25."""
        crop = CropRect(left=200, top=150, right=800, bottom=650)
        restored = AspectRestorer().restore(crop, 1000, 800)

        assert restored == CropRect(left=188, top=150, right=813, bottom=650)
        assert restored.ratio == pytest.approx(1.25)
        assert restored.contains(1000, 800)

    def test_too_wide_grows_height(self):
        """Test a wide crop grows evenly up and down."""
        crop = CropRect(left=0, top=40, right=100, bottom=60)
        restored = AspectRestorer().restore(crop, 100, 100)
        assert restored == CropRect(left=0, top=0, right=100, bottom=100)

    def test_odd_growth_goes_to_trailing_side(self):
        crop = CropRect(left=10, top=10, right=20, bottom=20)
        restored = AspectRestorer().restore(crop, 110, 100)
        assert restored == CropRect(left=10, top=10, right=21, bottom=20)

    def test_blocked_side_shifts_growth(self):
        """Test growth blocked at the top edge moves to the bottom."""
        crop = CropRect(left=0, top=2, right=200, bottom=52)
        restored = AspectRestorer().restore(crop, 200, 100)
        assert restored == CropRect(left=0, top=0, right=200, bottom=100)

        crop = CropRect(left=50, top=0, right=150, bottom=30)
        restored = AspectRestorer().restore(crop, 200, 100)
        assert restored == CropRect(left=50, top=0, right=150, bottom=50)

    def test_blocked_right_shifts_left(self):
        crop = CropRect(left=90, top=0, right=100, bottom=40)
        restored = AspectRestorer().restore(crop, 100, 50)
        assert restored == CropRect(left=20, top=0, right=100, bottom=40)

    def test_full_image_unchanged(self):
        crop = CropRect(0, 0, 1000, 800)
        assert AspectRestorer().restore(crop, 1000, 800) == crop

    def test_matching_ratio_unchanged(self):
        crop = CropRect(100, 100, 600, 500)
        assert AspectRestorer().restore(crop, 1000, 800) == crop

    def test_single_pixel(self):
        """Test the clamped 1x1 region of a blank image."""
        crop = CropRect(500, 400, 501, 401)
        restored = AspectRestorer().restore(crop, 1000, 800)
        assert (restored.width, restored.height) == (1, 1)

    def test_invalid_original_size(self):
        with pytest.raises(GeometryError):
            AspectRestorer().restore(CropRect(0, 0, 1, 1), 0, 10)


class TestFitAspect:
    """Test the bounded fit with fallback trimming."""

    def test_fallback_trims_width(self):
        """Test a crop that cannot grow tall enough is trimmed in width instead."""
        crop = CropRect(left=0, top=5, right=100, bottom=15)
        fitted = fit_aspect(crop, 100, 20, 1.0)
        assert fitted == CropRect(left=40, top=0, right=60, bottom=20)

    def test_fallback_trims_height(self):
        crop = CropRect(left=3, top=0, right=7, bottom=100)
        fitted = fit_aspect(crop, 10, 100, 0.5)
        assert fitted == CropRect(left=0, top=40, right=10, bottom=60)

    def test_invalid_arguments(self):
        crop = CropRect(0, 0, 10, 10)
        with pytest.raises(GeometryError):
            fit_aspect(crop, 10, 10, 0)
        with pytest.raises(GeometryError):
            fit_aspect(crop, 10, 10, float('inf'))
        with pytest.raises(GeometryError):
            fit_aspect(crop, 5, 10, 1.0)
        with pytest.raises(GeometryError):
            fit_aspect(CropRect(5, 5, 5, 8), 10, 10, 1.0)


class TestProperties:
    """Property checks over random crops."""

    @pytest.fixture
    def random_cases(self):
        rng = np.random.default_rng(1234)
        cases = []
        for _ in range(500):
            width = int(rng.integers(1, 400))
            height = int(rng.integers(1, 400))
            left = int(rng.integers(0, width))
            right = int(rng.integers(left + 1, width + 1))
            top = int(rng.integers(0, height))
            bottom = int(rng.integers(top + 1, height + 1))
            cases.append((CropRect(left, top, right, bottom), width, height))
        return cases

    def test_inside_bounds_and_ratio_close(self, random_cases):
        restorer = AspectRestorer()
        for crop, width, height in random_cases:
            restored = restorer.restore(crop, width, height)
            assert restored.contains(width, height)
            assert is_satisfied(restored.width, restored.height, width / height)

    def test_never_shrinks_crop(self, random_cases):
        """Test restoring the original ratio only ever adds pixels around the crop."""
        restorer = AspectRestorer()
        for crop, width, height in random_cases:
            restored = restorer.restore(crop, width, height)
            assert restored.left <= crop.left and restored.top <= crop.top
            assert restored.right >= crop.right and restored.bottom >= crop.bottom

    def test_idempotent(self, random_cases):
        restorer = AspectRestorer()
        for crop, width, height in random_cases:
            once = restorer.restore(crop, width, height)
            assert restorer.restore(once, width, height) == once

    def test_fit_aspect_idempotent(self, random_cases):
        """Test idempotence with arbitrary target ratios, fallback included."""
        rng = np.random.default_rng(99)
        for crop, width, height in random_cases:
            ratio = float(rng.uniform(0.05, 20.0))
            once = fit_aspect(crop, width, height, ratio)
            assert once.contains(width, height)
            assert fit_aspect(once, width, height, ratio) == once
