"""
Command line interface: crop artwork and restore it to the original aspect ratio.

Usage:
    cpar [OPTIONS] SOURCE... OUTPUT

Exit codes: 0 when the batch ran (individual files may have failed),
1 when the run could not start, 2 for invalid options, 130 when interrupted.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config.manager import DEFAULTS, ConfigManager
from .errors import ConfigError, SetupError
from .image.image_processor import ImageProcessor
from .utils.file_manager import resolve_sources

EXIT_OK = 0
EXIT_SETUP_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

# Options that map one-to-one onto configuration keys
SETTING_OPTIONS = (
    'threshold', 'x_threshold', 'y_threshold',
    'percentile', 'x_percentile', 'y_percentile',
    'extra', 'x_extra', 'y_extra',
    'blur', 'downscale', 'jpeg_quality',
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cpar',
        description="Crop Preserving Aspect Ratio: crops whitespace margins from "
                    "scanned artwork and restores it to the original aspect ratio.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Axis options (--xt, --yp, --ey, ...) take precedence over the shared option
for their axis. Values not given on the command line come from cpar.conf /
cpar.personal.conf in the current directory or from --config.

Examples:
    cpar scans/*.png cropped/
    cpar -t 240 -p 90 --ey 10 scan.jpg cropped/
    cpar -b 1.2 -d 2 scans/ cropped/
        """
    )

    parser.add_argument("source", nargs='+', metavar="SOURCE",
                        help="Source file(s) or directories to process")
    parser.add_argument("output", metavar="OUTPUT",
                        help="Output folder to place processed images within")

    crop = parser.add_argument_group("whitespace detection")
    crop.add_argument("-t", "--threshold", type=int,
                      help=f"Luminance (0-255) at or above which a pixel counts as whitespace "
                           f"in both axes (default: {DEFAULTS['threshold']})")
    crop.add_argument("--x-threshold", "--xt", type=int, dest="x_threshold",
                      help="Threshold for the x-axis (left/right edges)")
    crop.add_argument("--y-threshold", "--yt", type=int, dest="y_threshold",
                      help="Threshold for the y-axis (top/bottom edges)")
    crop.add_argument("-p", "--percentile", type=float,
                      help=f"Percent (0-100) of a row/column that must be whitespace for it to "
                           f"count as margin (default: {DEFAULTS['percentile']:g})")
    crop.add_argument("--x-percentile", "--xp", type=float, dest="x_percentile",
                      help="Percentile for the x-axis")
    crop.add_argument("--y-percentile", "--yp", type=float, dest="y_percentile",
                      help="Percentile for the y-axis")
    crop.add_argument("-e", "--extra", type=int,
                      help=f"Extra pixels to crop beyond each detected edge "
                           f"(default: {DEFAULTS['extra']})")
    crop.add_argument("--x-extra", "--ex", type=int, dest="x_extra",
                      help="Extra margin for the left and right edges")
    crop.add_argument("--y-extra", "--ey", type=int, dest="y_extra",
                      help="Extra margin for the top and bottom edges")

    output = parser.add_argument_group("output")
    output.add_argument("-b", "--blur", type=float,
                        help="Blur the cropped image with this Gaussian sigma (default: no blur)")
    output.add_argument("-d", "--downscale", type=float,
                        help=f"Downscale the cropped image by this factor "
                             f"(default: {DEFAULTS['downscale']:g})")
    output.add_argument("--jpeg-quality", type=int, dest="jpeg_quality",
                        help=f"Quality for JPEG/WebP output, 1-95 (default: {DEFAULTS['jpeg_quality']})")

    parser.add_argument("-c", "--config", help="Additional configuration file")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--debug", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(level: int = logging.INFO):
    """Setup logging configuration."""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove any existing handlers
    logger.handlers.clear()

    # Console handler - simple format (no timestamp/level)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown logging level: {name}")
    return level


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        config = ConfigManager(args.config)
        if not (args.debug or args.quiet):
            setup_logging(_level_from_name(config.get_log_level()))
        overrides = {name: getattr(args, name) for name in SETTING_OPTIONS}
        settings = config.build_settings(overrides)
    except ConfigError as e:
        logger.error(f"❌ {e}")
        return EXIT_CONFIG_ERROR

    logger.debug(f"Settings: {settings}")

    try:
        sources = resolve_sources(args.source)
        summary = ImageProcessor(settings).process_batch(sources, args.output)
    except SetupError as e:
        logger.error(f"❌ {e}")
        return EXIT_SETUP_ERROR

    if summary.interrupted:
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
