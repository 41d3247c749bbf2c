"""
Configuration management for cpar.

Settings come from, in increasing priority: built-in defaults, cpar.conf,
cpar.personal.conf, an explicit --config file, and command line options.
Within each layer an axis-specific key (x_threshold) beats the shared one
(threshold).
"""
import configparser
import logging
import math
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..errors import ConfigError
from ..models.crop import AxisParameters, CropSettings

DEFAULT_CONFIG_FILES = ('cpar.conf', 'cpar.personal.conf')

DEFAULTS: Dict[str, Any] = {
    'threshold': 250,
    'percentile': 95.0,
    'extra': 0,
    'blur': None,
    'downscale': 1.0,
    'jpeg_quality': 95,
    'level': 'INFO',
}

# key -> converter, [CROP] and [OUTPUT] sections
AXIS_KEYS = {
    'threshold': int,
    'percentile': float,
    'extra': int,
}
OUTPUT_KEYS = {
    'blur': float,
    'downscale': float,
    'jpeg_quality': int,
}


class ConfigManager:
    """Layered INI configuration plus resolution into CropSettings."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 search_dir: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Extra configuration file read last. Must exist if given.
            search_dir: Directory searched for cpar.conf / cpar.personal.conf.
                Defaults to the current working directory.
        """
        self.logger = logging.getLogger(__name__)
        base = Path(search_dir) if search_dir is not None else Path.cwd()
        self.config_files: List[Path] = [base / name for name in DEFAULT_CONFIG_FILES]
        if config_file is not None:
            config_file = Path(config_file)
            if not config_file.is_file():
                raise ConfigError(f"Configuration file not found: {config_file}")
            self.config_files.append(config_file)

        self.config = configparser.ConfigParser()
        self.loaded_files: List[str] = []
        self._load_config()

    def _load_config(self):
        """Read every existing configuration file; missing defaults are skipped."""
        try:
            self.loaded_files = self.config.read(self.config_files, encoding='utf-8')
        except configparser.Error as e:
            raise ConfigError(f"Cannot parse configuration: {e}") from e
        for path in self.loaded_files:
            self.logger.debug(f"Loaded configuration from {path}")

    def get(self, section: str, key: str, fallback: Any = None) -> Any:
        """Get configuration value."""
        try:
            return self.config.get(section, key, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def _get_typed(self, section: str, key: str, convert: Callable[[str], Any]) -> Any:
        raw = self.get(section, key)
        if raw is None or not str(raw).strip():
            return None
        try:
            return convert(str(raw).strip())
        except ValueError as e:
            raise ConfigError(f"Invalid value for [{section}] {key}: {raw!r}") from e

    def get_log_level(self) -> str:
        """Logging level name from [LOGGING] level."""
        return str(self.get('LOGGING', 'level', DEFAULTS['level'])).upper()

    def build_settings(self, overrides: Optional[Mapping[str, Any]] = None) -> CropSettings:
        """Resolve and validate the settings for a run.

        Args:
            overrides: Command line values keyed like the config file
                (threshold, x_threshold, ..., blur, downscale, jpeg_quality).
                None values are treated as not given.

        Returns:
            Validated CropSettings
        """
        overrides = overrides or {}

        def axis_params(axis: str) -> AxisParameters:
            values = {}
            for name, convert in AXIS_KEYS.items():
                values[name] = _first_given(
                    overrides.get(f'{axis}_{name}'),
                    overrides.get(name),
                    self._get_typed('CROP', f'{axis}_{name}', convert),
                    self._get_typed('CROP', name, convert),
                    DEFAULTS[name],
                )
            return AxisParameters(**values)

        output = {}
        for name, convert in OUTPUT_KEYS.items():
            output[name] = _first_given(
                overrides.get(name),
                self._get_typed('OUTPUT', name, convert),
                DEFAULTS[name],
            )

        settings = CropSettings(x=axis_params('x'), y=axis_params('y'), **output)
        validate_settings(settings)
        return settings


def _first_given(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def validate_settings(settings: CropSettings) -> None:
    """Raise ConfigError if any setting is out of range."""
    for axis, params in (('x', settings.x), ('y', settings.y)):
        if not 0 <= params.threshold <= 255:
            raise ConfigError(f"{axis} threshold must be within 0-255, got {params.threshold}")
        if not 0 <= params.percentile <= 100:
            raise ConfigError(f"{axis} percentile must be within 0-100, got {params.percentile}")
        if params.extra < 0:
            raise ConfigError(f"{axis} extra margin must not be negative, got {params.extra}")
    if not (settings.downscale > 0 and math.isfinite(settings.downscale)):
        raise ConfigError(f"Downscale factor must be positive, got {settings.downscale}")
    if settings.blur is not None and not (settings.blur > 0 and math.isfinite(settings.blur)):
        raise ConfigError(f"Blur sigma must be positive, got {settings.blur}")
    if not 1 <= settings.jpeg_quality <= 95:
        raise ConfigError(f"JPEG quality must be within 1-95, got {settings.jpeg_quality}")
