"""
Data models for crop detection and batch results.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class ProcessingStatus(Enum):
    """Processing status for a source file."""
    PROCESSED = "processed"
    FAILED = "failed"


@dataclass(frozen=True)
class AxisParameters:
    """Whitespace detection parameters for one axis."""
    threshold: int = 250
    percentile: float = 95.0
    extra: int = 0


@dataclass(frozen=True)
class CropSettings:
    """Resolved settings for a run. Built once, read-only afterwards."""
    x: AxisParameters = field(default_factory=AxisParameters)
    y: AxisParameters = field(default_factory=AxisParameters)
    blur: Optional[float] = None
    downscale: float = 1.0
    jpeg_quality: int = 95


@dataclass(frozen=True)
class AxisCuts:
    """Lines removed from the leading and trailing end of one axis."""
    leading: int
    trailing: int
    length: int
    content_found: bool = True


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in original image coordinates (right/bottom exclusive)."""
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def ratio(self) -> float:
        return self.width / self.height

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Pillow-style (left, upper, right, lower) box."""
        return (self.left, self.top, self.right, self.bottom)

    def contains(self, width: int, height: int) -> bool:
        """True if this is a non-empty rectangle inside a width x height image."""
        return 0 <= self.left < self.right <= width and 0 <= self.top < self.bottom <= height

    def __str__(self) -> str:
        return f"{self.width}x{self.height}+{self.left}+{self.top}"


@dataclass
class FileResult:
    """Outcome of processing one source file."""
    source: Path
    output: Optional[Path] = None
    status: ProcessingStatus = ProcessingStatus.FAILED
    detected: Optional[CropRect] = None
    final: Optional[CropRect] = None
    output_size: Optional[Tuple[int, int]] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is ProcessingStatus.PROCESSED


@dataclass
class BatchSummary:
    """Aggregated results of a batch run."""
    results: List[FileResult] = field(default_factory=list)
    interrupted: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def processed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def failures(self) -> List[FileResult]:
        return [r for r in self.results if not r.ok]
