"""
Exception types raised by cpar.

Per-file decode/encode failures are not wrapped: Pillow and OS errors are
caught at the ImageProcessor boundary and turned into failed results.
"""


class CparError(Exception):
    """Base class for cpar errors."""


class ConfigError(CparError, ValueError):
    """Invalid option or configuration value. Fatal, reported before processing."""


class SetupError(CparError):
    """Environment problem that prevents the run from starting."""


class GeometryError(CparError, ValueError):
    """Invalid input to the crop geometry functions."""
