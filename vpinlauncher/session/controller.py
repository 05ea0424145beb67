"""
Session controller.

Non-GUI core of the launcher: owns the table list and the current selection,
and wires scanning, snapshot lookup, score retrieval and emulator sessions
together. The UI talks to it through method calls and receives results as
events; it never touches the controller's state directly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from vpinlauncher.config.loader import ConfigError, get_config_value, require_path
from vpinlauncher.media.snapshots import Snapshot, SnapshotError, SnapshotLoader
from vpinlauncher.scanner.table_scanner import ScannerError, scan_tables
from vpinlauncher.scanner.table_types import TableDescriptor
from vpinlauncher.scores.nvram import NVRamScoreStore
from vpinlauncher.scores.retriever import ScoreRetriever
from vpinlauncher.scores.score_types import ScoreResult
from vpinlauncher.scores.store_mapping import ScoreStoreMapping, TitleToStoreResolver
from vpinlauncher.session.launcher import SessionBusyError, SessionLauncher, SessionOutcome
from vpinlauncher.ui.event_bus import EventBus
from vpinlauncher.ui.events import (
    NotificationEvent,
    SessionFinishedEvent,
    SessionStartedEvent,
    TableSelectedEvent,
    TablesScannedEvent,
)

logger = logging.getLogger(__name__)

_SEVERITY_LEVELS = {
    'information': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


@dataclass(frozen=True)
class TableSelection:
    """Everything shown for the selected table."""
    index: int
    table: TableDescriptor
    snapshot: Optional[Snapshot]
    score: ScoreResult


def build_retriever(config: Dict[str, Any]) -> ScoreRetriever:
    """Create the score retriever described by the scores/paths config."""
    mapping = ScoreStoreMapping.from_dict(get_config_value(config, 'scores.store_mapping'))
    store = NVRamScoreStore(
        require_path(config, 'nvram'),
        get_config_value(config, 'scores.layouts', {}) or {},
    )
    return ScoreRetriever(TitleToStoreResolver(mapping), store)


def build_snapshot_loader(config: Dict[str, Any]) -> SnapshotLoader:
    """Create the snapshot loader described by the snapshots/paths config."""
    return SnapshotLoader(
        require_path(config, 'snapshots'),
        get_config_value(config, 'snapshots.extension', '.png'),
    )


class SessionController:
    """
    Application core shared by the Textual UI and the headless CLI.

    Example:
        controller = SessionController(config, event_bus)
        controller.rescan()
        controller.select(0)
        outcome = await controller.play()
    """

    def __init__(
        self,
        config: Dict[str, Any],
        event_bus: Optional[EventBus] = None,
        retriever: Optional[ScoreRetriever] = None,
        snapshot_loader: Optional[SnapshotLoader] = None,
        launcher: Optional[SessionLauncher] = None
    ):
        """
        Initialize session controller

        Args:
            config: Validated configuration dictionary
            event_bus: Bus to publish events on (None for headless use)
            retriever: Score retriever (built from config if omitted)
            snapshot_loader: Snapshot loader (built from config if omitted)
            launcher: Session launcher (new instance if omitted)

        Raises:
            ConfigError: If a required path is missing
        """
        self.config = config
        self.event_bus = event_bus
        self.emulator_path = require_path(config, 'emulator')
        self.tables_dir = require_path(config, 'tables')
        self.popup_image_errors = bool(get_config_value(config, 'snapshots.popup_errors', False))

        self.retriever = retriever if retriever is not None else build_retriever(config)
        self.snapshot_loader = (
            snapshot_loader if snapshot_loader is not None else build_snapshot_loader(config)
        )
        self.launcher = launcher if launcher is not None else SessionLauncher()

        self._tables: Tuple[TableDescriptor, ...] = ()
        self._selection: Optional[TableSelection] = None
        self.scan_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def tables(self) -> Tuple[TableDescriptor, ...]:
        return self._tables

    @property
    def current_table(self) -> Optional[TableDescriptor]:
        return self._selection.table if self._selection else None

    @property
    def current_selection(self) -> Optional[TableSelection]:
        return self._selection

    def titles(self) -> List[str]:
        """Display titles in list order."""
        return [table.display_title for table in self._tables]

    def find_table(self, name: str) -> Optional[int]:
        """
        Find a table by raw file name or display title (case-insensitive).

        Returns:
            Index into ``tables``, or None if no table matches
        """
        wanted = name.strip().lower()
        for index, table in enumerate(self._tables):
            if wanted in (table.raw_filename.lower(), table.display_title.lower()):
                return index
        return None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def rescan(self) -> Tuple[TableDescriptor, ...]:
        """
        Rebuild the table list from the tables directory.

        Scan errors are reported as notifications and leave an empty list.

        Raises:
            SessionBusyError: If a session is running
        """
        self._ensure_idle("rescan tables")

        try:
            tables = scan_tables(self.tables_dir)
            self.scan_error = None
        except (ScannerError, ConfigError) as e:
            self.scan_error = e
            self._notify(str(e), 'error')
            tables = []

        self._tables = tuple(tables)
        self._selection = None
        self._publish(TablesScannedEvent(tables=self._tables, tables_dir=str(self.tables_dir)))
        return self._tables

    def select(self, index: int) -> TableSelection:
        """
        Make a table current and gather its snapshot and high score.

        Args:
            index: Position in ``tables``

        Returns:
            TableSelection for the chosen table

        Raises:
            IndexError: If index is out of range
            SessionBusyError: If a session is running
        """
        self._ensure_idle("change the selected table")

        if not 0 <= index < len(self._tables):
            raise IndexError(f"Table index out of range: {index}")

        table = self._tables[index]
        logger.debug(f"Selected table: {table.raw_filename}")

        selection = TableSelection(
            index=index,
            table=table,
            snapshot=self._load_snapshot(table),
            score=self.retriever.fetch(table.display_title),
        )
        self._selection = selection
        self._publish(TableSelectedEvent(
            index=index,
            table=table,
            snapshot=selection.snapshot,
            score=selection.score,
        ))
        return selection

    async def play(self) -> SessionOutcome:
        """
        Launch the emulator for the current table and wait for it to exit.

        Returns:
            SessionOutcome; failures are also published as notifications
        """
        table = self.current_table
        if table is None:
            outcome = SessionOutcome.failed("no table selected")
            self._notify("Select a table before playing", 'warning')
            return outcome

        if self.launcher.is_busy:
            self._notify("A table is already running", 'warning')
            return SessionOutcome.failed("session already running")

        await self._publish_async(SessionStartedEvent(table=table))
        outcome = await self.launcher.launch(self.emulator_path, table.path_in(self.tables_dir))
        await self._publish_async(SessionFinishedEvent(table=table, outcome=outcome))

        if outcome.is_failure:
            self._notify(f"Could not play {table.display_title}: {outcome.reason}", 'error')
        return outcome

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_idle(self, action: str) -> None:
        if self.launcher.is_busy:
            raise SessionBusyError(f"Cannot {action} while a table is running")

    def _load_snapshot(self, table: TableDescriptor) -> Optional[Snapshot]:
        try:
            return self.snapshot_loader.load(table)
        except SnapshotError as e:
            if self.popup_image_errors:
                self._notify(str(e), 'warning')
            else:
                logger.warning(str(e))
            return None

    def _notify(self, message: str, severity: str) -> None:
        logger.log(_SEVERITY_LEVELS.get(severity, logging.WARNING), message)
        self._publish(NotificationEvent(message=message, severity=severity))

    def _publish(self, event: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish_sync(event)

    async def _publish_async(self, event: Any) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(event)
