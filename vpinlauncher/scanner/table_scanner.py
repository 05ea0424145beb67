"""Tables directory scanner implementation."""

import logging
from pathlib import Path
from typing import List, Union

from vpinlauncher.config.loader import ConfigError
from vpinlauncher.scanner.name_normalizer import TABLE_EXTENSION
from vpinlauncher.scanner.table_types import TableDescriptor

logger = logging.getLogger(__name__)


class ScannerError(Exception):
    """Table scanning errors."""
    pass


class TablesNotFoundError(ScannerError):
    """Tables directory is missing or not a directory."""
    pass


class TablesPermissionError(ScannerError):
    """Tables directory cannot be listed."""
    pass


def scan_tables(tables_path: Union[str, Path, None]) -> List[TableDescriptor]:
    """
    Scan the tables directory for playable table files.

    Only regular files ending in ``.vpx`` (case-sensitive) are kept. Hidden
    entries, directories and other extensions are skipped silently. The
    result is sorted by file name; directory listing order varies between
    filesystems.

    Args:
        tables_path: Directory containing the table files

    Returns:
        List of TableDescriptor objects, sorted by raw file name

    Raises:
        ConfigError: If tables_path is empty
        TablesNotFoundError: If the directory does not exist
        TablesPermissionError: If the directory cannot be listed
    """
    if not tables_path:
        raise ConfigError("tables path was empty")

    tables_dir = Path(tables_path).expanduser()

    if not tables_dir.exists():
        raise TablesNotFoundError(f"Tables directory not found: {tables_dir}")

    if not tables_dir.is_dir():
        raise TablesNotFoundError(f"Tables path is not a directory: {tables_dir}")

    try:
        entries = list(tables_dir.iterdir())
    except PermissionError:
        raise TablesPermissionError(f"Permission denied accessing tables directory: {tables_dir}")
    except OSError as e:
        raise ScannerError(f"Failed to scan tables directory: {e}")

    logger.debug(f"Found {len(entries)} entries in {tables_dir}")

    tables = []
    for entry in entries:
        # Skip hidden files/directories
        if entry.name.startswith('.'):
            continue

        if not entry.name.endswith(TABLE_EXTENSION):
            continue

        if not entry.is_file():
            continue

        tables.append(TableDescriptor.from_filename(entry.name))

    tables.sort(key=lambda t: t.raw_filename)

    logger.info(f"Scan complete: {len(tables)} tables found in {tables_dir}")
    return tables
