"""
Aspect ratio restoration for crop rectangles.

The detected crop is grown along its short side until its width/height ratio
matches the original image again. Growth is split evenly between both sides;
a side blocked by the image bound hands its share to the opposite side. If
the crop cannot grow enough, it takes the full span of that axis and the
other axis is trimmed instead.

Pixel rounding means the ratio is only matched to the closest integer
rectangle, never exactly.
"""

import logging
import math
from typing import Tuple

from ..errors import GeometryError
from ..models.crop import CropRect


def _grow(start: int, end: int, target: int, limit: int) -> Tuple[int, int]:
    """Grow [start, end) to `target` lines within [0, limit)."""
    need = target - (end - start)
    before = need // 2
    after = need - before
    if before > start:
        after += before - start
        before = start
    if after > limit - end:
        before += after - (limit - end)
        after = limit - end
    return start - before, end + after


def _shrink(start: int, end: int, target: int) -> Tuple[int, int]:
    """Shrink [start, end) to `target` lines around its centre."""
    before = ((end - start) - target) // 2
    return start + before, start + before + target


def is_satisfied(width: int, height: int, ratio: float) -> bool:
    """True if no single-axis adjustment gets closer to `ratio`."""
    return (max(1, round(width / ratio)) == height
            or max(1, round(height * ratio)) == width)


def fit_aspect(crop: CropRect, bounds_width: int, bounds_height: int, ratio: float) -> CropRect:
    """Adjust a crop rectangle to a width/height ratio inside the given bounds.

    Args:
        crop: Crop rectangle inside [0, bounds_width] x [0, bounds_height]
        bounds_width: Width of the image the crop refers to
        bounds_height: Height of the image the crop refers to
        ratio: Target width/height ratio

    Returns:
        New CropRect inside the bounds whose ratio is the closest achievable
        integer approximation of `ratio`. Unchanged if already satisfied.
    """
    if bounds_width < 1 or bounds_height < 1:
        raise GeometryError(f"Bounds must be positive, got {bounds_width}x{bounds_height}")
    if not (ratio > 0 and math.isfinite(ratio)):
        raise GeometryError(f"Aspect ratio must be positive and finite, got {ratio}")
    if not crop.contains(bounds_width, bounds_height):
        raise GeometryError(f"Crop {crop.box} is not inside {bounds_width}x{bounds_height}")

    width, height = crop.width, crop.height
    if is_satisfied(width, height, ratio):
        return crop

    left, top, right, bottom = crop.box
    if width / height > ratio:
        # Too wide: grow height, or take full height and trim width
        target_height = max(1, round(width / ratio))
        if target_height <= bounds_height:
            top, bottom = _grow(top, bottom, target_height, bounds_height)
        else:
            target_width = min(width, max(1, round(bounds_height * ratio)))
            left, right = _shrink(left, right, target_width)
            top, bottom = 0, bounds_height
    else:
        # Too tall: grow width, or take full width and trim height
        target_width = max(1, round(height * ratio))
        if target_width <= bounds_width:
            left, right = _grow(left, right, target_width, bounds_width)
        else:
            target_height = min(height, max(1, round(bounds_width / ratio)))
            top, bottom = _shrink(top, bottom, target_height)
            left, right = 0, bounds_width

    return CropRect(left=left, top=top, right=right, bottom=bottom)


class AspectRestorer:
    """Restores a crop rectangle to the aspect ratio of its source image."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def restore(self, crop: CropRect, original_width: int, original_height: int) -> CropRect:
        """Fit `crop` to the original_width/original_height ratio within the original image."""
        if original_width < 1 or original_height < 1:
            raise GeometryError(f"Original size must be positive, got {original_width}x{original_height}")
        ratio = original_width / original_height
        restored = fit_aspect(crop, original_width, original_height, ratio)
        if restored != crop:
            self.logger.debug(f"Restored aspect {ratio:.4f}: {crop} -> {restored} "
                              f"(ratio {crop.ratio:.4f} -> {restored.ratio:.4f})")
        return restored
