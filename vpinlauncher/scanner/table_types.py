"""Table type definitions and data structures."""

from dataclasses import dataclass
from pathlib import Path

from vpinlauncher.scanner.name_normalizer import display_title, normalize_key


@dataclass(frozen=True)
class TableDescriptor:
    """
    A playable table found in the tables directory.

    Derived names are computed once from ``raw_filename`` and never set
    independently; use ``from_filename`` to build instances.
    """
    raw_filename: str               # On-disk name, e.g. "Viper (Stern 1981).vpx"
    display_title: str              # Title for the table list
    normalized_key: str             # Snapshot lookup key

    @classmethod
    def from_filename(cls, raw_filename: str) -> "TableDescriptor":
        """Build a descriptor from an on-disk table file name."""
        return cls(
            raw_filename=raw_filename,
            display_title=display_title(raw_filename),
            normalized_key=normalize_key(raw_filename),
        )

    def path_in(self, tables_dir: Path) -> Path:
        """
        Get the absolute path of this table inside a tables directory.

        Args:
            tables_dir: Directory the table was scanned from

        Returns:
            Absolute path to the table file
        """
        return (Path(tables_dir).expanduser() / self.raw_filename).absolute()
