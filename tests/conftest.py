"""Shared fixtures for cpar tests."""

import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def make_artwork():
    """Factory for synthetic scans: white background with a dark content box."""
    def _make(width, height, box=None, background=255, ink=0, channels=None):
        image = np.full((height, width), background, dtype=np.uint8)
        if box is not None:
            left, top, right, bottom = box
            image[top:bottom, left:right] = ink
        if channels:
            image = np.repeat(image[:, :, None], channels, axis=2)
            if channels == 4:
                image[:, :, 3] = 255
        return image
    return _make


@pytest.fixture
def write_image(tmp_path):
    """Write an array to tmp_path/name with Pillow and return the path."""
    def _write(image, name):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(image).save(path)
        return path
    return _write
