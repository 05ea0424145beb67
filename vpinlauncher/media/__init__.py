"""
Snapshot media package for vpinlauncher.

Locates and probes the preview image associated with each table.
"""

from .snapshots import Snapshot, SnapshotLoader, SnapshotError, SnapshotNotFoundError

__all__ = [
    "Snapshot",
    "SnapshotLoader",
    "SnapshotError",
    "SnapshotNotFoundError",
]
