"""
Image processing: whitespace detection, crop geometry and the file pipeline.
"""

from .edge_scanner import EdgeScanner
from .crop_calculator import CropCalculator
from .aspect_restorer import AspectRestorer, fit_aspect
from .image_processor import ImageProcessor

__all__ = ['EdgeScanner', 'CropCalculator', 'AspectRestorer', 'fit_aspect', 'ImageProcessor']
