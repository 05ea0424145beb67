"""Event types for UI updates.

This module defines the events that flow from the session controller to the
UI. Events are immutable dataclasses; a selection event carries the chosen
table itself so subscribers never read shared "current table" state.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

from vpinlauncher.media.snapshots import Snapshot
from vpinlauncher.scanner.table_types import TableDescriptor
from vpinlauncher.scores.score_types import ScoreResult
from vpinlauncher.session.launcher import SessionOutcome


@dataclass(frozen=True)
class TablesScannedEvent:
    """Emitted after the tables directory is (re)scanned.

    Attributes:
        tables: Tables found, in display order
        tables_dir: Directory that was scanned
    """
    tables: Tuple[TableDescriptor, ...]
    tables_dir: str


@dataclass(frozen=True)
class TableSelectedEvent:
    """Emitted when a table is selected.

    Attributes:
        index: Position of the table in the list
        table: The selected table
        snapshot: Snapshot image, or None if unavailable
        score: High score lookup result
    """
    index: int
    table: TableDescriptor
    snapshot: Optional[Snapshot]
    score: ScoreResult


@dataclass(frozen=True)
class SessionStartedEvent:
    """Emitted when the emulator is about to be launched."""
    table: TableDescriptor


@dataclass(frozen=True)
class SessionFinishedEvent:
    """Emitted exactly once per launch with its outcome."""
    table: TableDescriptor
    outcome: SessionOutcome


@dataclass(frozen=True)
class NotificationEvent:
    """Emitted for user-facing, non-fatal problems.

    Attributes:
        message: Short message for display
        severity: Notification severity
    """
    message: str
    severity: Literal['information', 'warning', 'error'] = 'warning'


@dataclass(frozen=True)
class LogEntryEvent:
    """Emitted for log messages.

    Attributes:
        level: Logging level (logging.DEBUG, INFO, WARNING, ERROR, CRITICAL)
        message: Formatted log message
        timestamp: When the log was generated
    """
    level: int
    message: str
    timestamp: datetime
