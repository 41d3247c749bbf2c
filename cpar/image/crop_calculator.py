"""
Combines per-axis cuts into a crop rectangle.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from ..errors import GeometryError
from ..models.crop import AxisCuts, CropRect


def resolve_span(leading: int, trailing: int, length: int) -> Tuple[int, int, bool]:
    """Turn leading/trailing cuts into a [start, end) span of at least one line.

    If the cuts meet or cross, the span collapses to a single line at the
    midpoint of the two boundaries, clamped into [0, length).

    Returns:
        Tuple of (start, end, collapsed)
    """
    if length < 1:
        raise GeometryError(f"Axis length must be positive, got {length}")
    start = leading
    end = length - trailing
    if end > start:
        return start, end, False
    middle = int(math.floor((start + end) / 2))
    middle = min(max(middle, 0), length - 1)
    return middle, middle + 1, True


class CropCalculator:
    """Builds a validated CropRect from x and y axis cuts."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def compute(self, image: np.ndarray, x_cuts: AxisCuts, y_cuts: AxisCuts,
                warnings: Optional[List[str]] = None) -> CropRect:
        """Compute the crop rectangle for an image.

        Degenerate spans (no content found, or extra margins larger than the
        content) are clamped to a 1-pixel band instead of failing.

        Args:
            image: Image array the cuts were computed from
            x_cuts: Column cuts (left/right)
            y_cuts: Row cuts (top/bottom)
            warnings: Optional list that receives a message per clamped axis

        Returns:
            CropRect inside the image bounds with width and height >= 1
        """
        height, width = image.shape[:2]
        if x_cuts.length != width or y_cuts.length != height:
            raise GeometryError(
                f"Cuts computed for {x_cuts.length}x{y_cuts.length}, image is {width}x{height}"
            )

        left, right, x_collapsed = resolve_span(x_cuts.leading, x_cuts.trailing, width)
        top, bottom, y_collapsed = resolve_span(y_cuts.leading, y_cuts.trailing, height)

        for axis, cuts, collapsed, position in (('x', x_cuts, x_collapsed, left),
                                                 ('y', y_cuts, y_collapsed, top)):
            if not collapsed:
                continue
            if cuts.content_found:
                reason = "extra margin leaves no content"
            else:
                reason = "no content found"
            message = f"{reason} on {axis} axis; clamped to a 1-pixel band at {axis}={position}"
            self.logger.warning(message)
            if warnings is not None:
                warnings.append(message)

        return CropRect(left=left, top=top, right=right, bottom=bottom)
