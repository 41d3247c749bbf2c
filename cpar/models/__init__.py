"""
Data models for cpar.
"""

from .crop import (
    AxisCuts,
    AxisParameters,
    BatchSummary,
    CropRect,
    CropSettings,
    FileResult,
    ProcessingStatus,
)

__all__ = [
    'AxisCuts',
    'AxisParameters',
    'BatchSummary',
    'CropRect',
    'CropSettings',
    'FileResult',
    'ProcessingStatus',
]
