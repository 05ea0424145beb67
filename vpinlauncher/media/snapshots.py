"""Snapshot image lookup and validation."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from vpinlauncher.scanner.table_types import TableDescriptor

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Snapshot image errors."""
    pass


class SnapshotNotFoundError(SnapshotError):
    """No snapshot image exists for a table."""
    pass


@dataclass(frozen=True)
class Snapshot:
    """A table's preview image on disk."""
    path: Path
    width: int
    height: int

    def describe(self) -> str:
        return f"{self.path.name} ({self.width}x{self.height})"


class SnapshotLoader:
    """
    Locate snapshot images by normalized table key.

    Images live flat in one directory and are named
    ``<normalized_key><extension>``.
    """

    def __init__(self, snapshots_dir: Union[str, Path], extension: str = ".png"):
        self.snapshots_dir = Path(snapshots_dir).expanduser()
        self.extension = extension

    def path_for(self, table: TableDescriptor) -> Path:
        """Get the expected snapshot path for a table."""
        return self.snapshots_dir / f"{table.normalized_key}{self.extension}"

    def load(self, table: TableDescriptor) -> Snapshot:
        """
        Load snapshot metadata for a table.

        Args:
            table: Table to find the snapshot for

        Returns:
            Snapshot with path and pixel dimensions

        Raises:
            SnapshotNotFoundError: If the image file does not exist
            SnapshotError: If the file is not a readable image
        """
        image_path = self.path_for(table)

        if not image_path.is_file():
            raise SnapshotNotFoundError(f"Did not find table image file: {image_path}")

        try:
            with Image.open(image_path) as img:
                width, height = img.size
        except (UnidentifiedImageError, OSError) as e:
            raise SnapshotError(f"Failed to read table image {image_path}: {e}")

        logger.debug(f"Loaded snapshot {image_path} ({width}x{height})")
        return Snapshot(path=image_path, width=width, height=height)
