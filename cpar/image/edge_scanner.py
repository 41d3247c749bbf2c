"""
Whitespace margin detection along one image axis.

A pixel is blank when its luminance is at or above the threshold. A line
(column for the x axis, row for the y axis) is whitespace when at least
`percentile` percent of its pixels are blank. Every pixel of a line is
sampled. Scanning runs from each end inward and stops at the first line
that fails the test.
"""

import logging

import cv2
import numpy as np

from ..errors import GeometryError
from ..models.crop import AxisCuts, AxisParameters

AXES = ('x', 'y')


def to_luminance(image: np.ndarray) -> np.ndarray:
    """Return a 2-D luminance view of an image array.

    Colour arrays are converted with OpenCV (ITU-R BT.601 weights). Alpha is
    ignored. Grayscale arrays are returned as-is.
    """
    if image.ndim == 2:
        return image
    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 3:
            return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    raise ValueError(f"Unsupported image array shape: {image.shape}")


class EdgeScanner:
    """Finds leading and trailing whitespace margins of an image axis."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def scan(self, image: np.ndarray, axis: str, params: AxisParameters) -> AxisCuts:
        """Scan one axis for whitespace margins.

        Args:
            image: Image array (grayscale or colour)
            axis: 'x' to scan columns (left/right), 'y' to scan rows (top/bottom)
            params: Threshold, percentile and extra margin for this axis

        Returns:
            AxisCuts with the number of lines to remove at each end. The extra
            margin is added to the trailing cut, which never passes the
            leading cut. If every line is whitespace, both cuts span the full
            axis and content_found is False.
        """
        if axis not in AXES:
            raise ValueError(f"Unknown axis {axis!r}, expected one of {AXES}")

        gray = to_luminance(image)
        height, width = gray.shape
        if height == 0 or width == 0:
            raise GeometryError(f"Cannot scan an empty image ({width}x{height})")

        # Each row of `lines` is one scanned line
        lines = gray.T if axis == 'x' else gray
        whitespace = self.classify_lines(lines, params)
        length = whitespace.size

        if whitespace.all():
            self.logger.debug(f"Axis {axis}: every line is whitespace")
            leading = trailing = length
            content_found = False
        else:
            # argmin finds the first False, i.e. the first content line
            leading = int(np.argmin(whitespace))
            trailing = int(np.argmin(whitespace[::-1]))
            content_found = True

        self.logger.debug(f"Axis {axis}: detected cuts leading={leading} trailing={trailing} "
                          f"of {length}, extra={params.extra}")

        # Extra margin comes off the trailing edge (right/bottom) only
        if content_found:
            trailing = min(trailing + params.extra, length - leading)

        return AxisCuts(
            leading=leading,
            trailing=trailing,
            length=length,
            content_found=content_found,
        )

    @staticmethod
    def classify_lines(lines: np.ndarray, params: AxisParameters) -> np.ndarray:
        """Classify each row of a 2-D array as whitespace (True) or content (False)."""
        blank_counts = np.count_nonzero(lines >= params.threshold, axis=1)
        line_length = lines.shape[1]
        # blank_counts / line_length >= percentile / 100, kept integral on the left
        return blank_counts * 100 >= params.percentile * line_length
