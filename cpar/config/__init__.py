"""
Configuration loading and settings resolution.
"""

from .manager import ConfigManager, validate_settings

__all__ = ['ConfigManager', 'validate_settings']
