"""
Crop-preserving-aspect-ratio pipeline for scanned artwork.

Pipeline per source file:
1. Decode with Pillow into a NumPy array
2. Scan columns and rows for whitespace margins (EdgeScanner)
3. Build the crop rectangle, clamping degenerate spans (CropCalculator)
4. Grow the crop back to the original aspect ratio (AspectRestorer)
5. Crop, then optionally blur (OpenCV Gaussian) and resample (OpenCV resize)
6. Encode to the output directory under the same file name

Each file is processed independently: a failing file is logged and skipped,
and the batch carries on.
"""

import logging
import math
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image

from ..models.crop import BatchSummary, CropRect, CropSettings, FileResult, ProcessingStatus
from ..utils.file_manager import FileManager
from .aspect_restorer import AspectRestorer
from .crop_calculator import CropCalculator
from .edge_scanner import EdgeScanner, to_luminance

# Formats whose Pillow writers accept a quality setting
QUALITY_FORMATS = {'JPEG', 'WEBP'}
# Formats that cannot store an alpha channel
NO_ALPHA_FORMATS = {'JPEG'}
# Grayscale modes holding 16-bit samples
HIGH_BIT_DEPTH_MODES = {'I;16', 'I;16L', 'I;16B', 'I;16N', 'I'}


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Decode an image file into an L, RGB or RGBA uint8 array.

    16-bit grayscale (modes I;16* and I) is scaled down to 8 bits; floating
    point images are rejected.
    """
    with Image.open(path) as img:
        img.load()
        if img.mode in HIGH_BIT_DEPTH_MODES:
            # Keep the top 8 of 16 bits
            wide = np.clip(np.array(img, dtype=np.int64), 0, 65535)
            return (wide >> 8).astype(np.uint8)
        if img.mode == 'F':
            raise ValueError(f"Unsupported floating point image mode: {img.mode}")
        if img.mode == '1':
            img = img.convert('L')
        elif img.mode not in ('L', 'RGB', 'RGBA'):
            if 'A' in img.getbands() or 'transparency' in img.info:
                img = img.convert('RGBA')
            else:
                img = img.convert('RGB')
        return np.array(img)


def save_image(image: np.ndarray, path: Union[str, Path], jpeg_quality: int = 95) -> None:
    """Encode an array to `path`, choosing the format from the file extension."""
    path = Path(path)
    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise ValueError(f"Unsupported output file extension: {path.suffix or '(none)'}")

    img = Image.fromarray(image)
    if fmt in NO_ALPHA_FORMATS and img.mode == 'RGBA':
        img = img.convert('RGB')

    save_kwargs = {}
    if fmt in QUALITY_FORMATS:
        save_kwargs['quality'] = jpeg_quality
    img.save(path, format=fmt, **save_kwargs)


def crop_array(image: np.ndarray, crop: CropRect) -> np.ndarray:
    """Copy of the pixels inside `crop`."""
    return image[crop.top:crop.bottom, crop.left:crop.right].copy()


def blur_array(image: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian blur with standard deviation `sigma`; kernel size derived from sigma."""
    return cv2.GaussianBlur(image, (0, 0), sigmaX=sigma, sigmaY=sigma)


def downscale_array(image: np.ndarray, factor: float) -> np.ndarray:
    """Resize by 1/factor, flooring each dimension (minimum 1 pixel)."""
    height, width = image.shape[:2]
    new_width = max(1, int(math.floor(width / factor)))
    new_height = max(1, int(math.floor(height / factor)))
    if (new_width, new_height) == (width, height):
        return image
    interpolation = cv2.INTER_AREA if factor > 1 else cv2.INTER_CUBIC
    return cv2.resize(image, (new_width, new_height), interpolation=interpolation)


class ImageProcessor:
    """Runs the crop pipeline on arrays, single files and batches."""

    def __init__(self, settings: Optional[CropSettings] = None):
        """Initialize image processor.

        Args:
            settings: Resolved run settings. Defaults to CropSettings().
        """
        self.settings = settings or CropSettings()
        self.logger = logging.getLogger(__name__)
        self.scanner = EdgeScanner()
        self.calculator = CropCalculator()
        self.restorer = AspectRestorer()

    def compute_crop(self, image: np.ndarray) -> Tuple[CropRect, CropRect, List[str]]:
        """Detect the content crop and restore it to the image's aspect ratio.

        Returns:
            Tuple of (detected crop, final crop, geometry warnings)
        """
        warnings: List[str] = []
        height, width = image.shape[:2]
        gray = to_luminance(image)
        x_cuts = self.scanner.scan(gray, 'x', self.settings.x)
        y_cuts = self.scanner.scan(gray, 'y', self.settings.y)
        detected = self.calculator.compute(gray, x_cuts, y_cuts, warnings=warnings)
        final = self.restorer.restore(detected, width, height)
        return detected, final, warnings

    def process_array(self, image: np.ndarray) -> Tuple[np.ndarray, CropRect, CropRect, List[str]]:
        """Apply the full pipeline to a decoded image.

        Returns:
            Tuple of (output array, detected crop, final crop, geometry warnings)
        """
        detected, final, warnings = self.compute_crop(image)
        result = crop_array(image, final)
        if self.settings.blur is not None:
            result = blur_array(result, self.settings.blur)
        if self.settings.downscale != 1.0:
            result = downscale_array(result, self.settings.downscale)
        return result, detected, final, warnings

    def process_file(self, source: Union[str, Path], output: Union[str, Path]) -> FileResult:
        """Process one file. Failures are logged and returned, never raised.

        Args:
            source: Input image path
            output: Output image path

        Returns:
            FileResult describing the outcome
        """
        source = Path(source)
        output = Path(output)
        result = FileResult(source=source, output=output)

        try:
            image = load_image(source)
            processed, detected, final, warnings = self.process_array(image)
            save_image(processed, output, jpeg_quality=self.settings.jpeg_quality)
        except Exception as e:
            result.error = f"{type(e).__name__}: {e}"
            self.logger.warning(f"⚠️  Skipping {source}: {result.error}")
            return result

        height, width = image.shape[:2]
        result.status = ProcessingStatus.PROCESSED
        result.detected = detected
        result.final = final
        result.output_size = (processed.shape[1], processed.shape[0])
        result.warnings.extend(warnings)
        self.logger.info(f"✅ {source.name}: {width}x{height}, content {detected}, "
                         f"crop {final} -> {result.output_size[0]}x{result.output_size[1]}")
        return result

    def process_batch(self, sources: Iterable[Union[str, Path]],
                      output_dir: Union[str, Path]) -> BatchSummary:
        """Process every source into output_dir, one file at a time.

        The output directory is created first; failing to create it raises
        SetupError. Ctrl+C abandons the current file, skips the rest and marks
        the summary as interrupted.
        """
        file_manager = FileManager(output_dir)
        file_manager.ensure_output_dir()
        summary = BatchSummary()

        try:
            for source in sources:
                source = Path(source)
                output = file_manager.output_path_for(source)
                if output.exists() and output.resolve() == source.resolve():
                    message = "output would overwrite the source file"
                    self.logger.warning(f"⚠️  Skipping {source}: {message}")
                    summary.results.append(FileResult(source=source, output=output, error=message))
                    continue
                self.logger.debug(f"Processing {source.name}")
                summary.results.append(self.process_file(source, output))
        except KeyboardInterrupt:
            summary.interrupted = True
            self.logger.warning("⚠️  Interrupted, no further files will be processed")

        self.logger.info(f"Done. Processed {summary.processed} of {summary.total} file(s); "
                         f"failed {summary.failed}.")
        return summary
