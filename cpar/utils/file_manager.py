"""
File management utilities for batch cropping.
Handles source resolution, output directory creation and output naming.
"""
import glob
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

from ..errors import SetupError

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.webp', '.gif'}
GLOB_CHARACTERS = set('*?[')


class FileManager:
    """Maps source images to output paths inside one output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        """
        Initialize FileManager.

        Args:
            output_dir: Directory that receives processed images
        """
        self.logger = logging.getLogger(__name__)
        self.output_dir = Path(output_dir)
        self._claimed: Dict[str, Path] = {}

    def ensure_output_dir(self) -> Path:
        """Create the output directory if it doesn't exist.

        Safe to call concurrently or repeatedly. Raises SetupError if the path
        exists and is not a directory, or cannot be created.
        """
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise SetupError(f"Output path is not a directory: {self.output_dir}")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SetupError(f"Cannot create output directory {self.output_dir}: {e}") from e
        self.logger.debug(f"Ensured directory exists: {self.output_dir}")
        return self.output_dir

    def output_path_for(self, source: Path) -> Path:
        """Output path mirroring the source basename.

        Logs a warning when two sources in this run share a basename; the
        later one overwrites the earlier output.
        """
        destination = self.output_dir / source.name
        key = source.name
        previous = self._claimed.get(key)
        if previous is not None and previous != source:
            self.logger.warning(f"⚠️  {source} has the same name as {previous}; "
                                f"{destination} will be overwritten")
        self._claimed[key] = source
        return destination


def has_glob_pattern(text: str) -> bool:
    """True if `text` contains a glob wildcard (*, ? or [)."""
    return any(char in GLOB_CHARACTERS for char in text)


def resolve_sources(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expand command line source arguments into image file paths.

    Files are taken as given. Directories contribute their image files
    (non-recursive, hidden files skipped). Arguments that still contain glob
    characters, e.g. from shells that don't expand them, are expanded here.
    Missing paths are logged and skipped; duplicates are dropped in order.

    Raises:
        SetupError: If nothing resolves to a file.
    """
    logger = logging.getLogger(__name__)
    resolved: List[Path] = []
    seen = set()

    def add(candidate: Path):
        key = candidate.resolve()
        if key not in seen:
            seen.add(key)
            resolved.append(candidate)

    for raw in paths:
        path = Path(raw)
        if path.is_file():
            add(path)
        elif path.is_dir():
            for child in sorted(path.iterdir()):
                if (child.is_file()
                        and child.suffix.lower() in IMAGE_EXTENSIONS
                        and not child.name.startswith('.')):
                    add(child)
        elif has_glob_pattern(str(raw)):
            matches = sorted(glob.glob(str(raw)))
            if not matches:
                logger.warning(f"⚠️  No files match {raw}")
            for match in matches:
                if Path(match).is_file():
                    add(Path(match))
        else:
            logger.warning(f"⚠️  Source not found: {raw}")

    if not resolved:
        raise SetupError("No source files to process")
    logger.debug(f"Resolved {len(resolved)} source file(s)")
    return resolved
