"""
Textual UI for vpinlauncher

Table list on the left; score, snapshot and play button on the right; log
output along the bottom. All state changes arrive as events from the
session controller.
"""

import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, RichLog, Static
from rich.text import Text

from vpinlauncher.session.controller import SessionController
from vpinlauncher.session.launcher import OutcomeKind, SessionBusyError
from vpinlauncher.ui.event_bus import EventBus
from vpinlauncher.ui.events import (
    LogEntryEvent,
    NotificationEvent,
    SessionFinishedEvent,
    SessionStartedEvent,
    TableSelectedEvent,
    TablesScannedEvent,
)

logger = logging.getLogger(__name__)

LOG_LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "",
    logging.WARNING: "yellow",
    logging.ERROR: "bold red",
    logging.CRITICAL: "bold white on red",
}


class SnapshotPanel(Static):
    """Shows the selected table's title and snapshot details."""

    def show_selection(self, event: TableSelectedEvent) -> None:
        text = Text(event.table.display_title, style="bold")
        text.append("\n\n")
        if event.snapshot is not None:
            text.append(f"Snapshot: {event.snapshot.describe()}\n")
            text.append(str(event.snapshot.path), style="dim")
        else:
            text.append("No snapshot available", style="dim italic")
        self.update(text)

    def clear_selection(self) -> None:
        self.update(Text("No table selected", style="dim italic"))


class LauncherUI(App):
    """vpinlauncher Textual application."""

    CSS_PATH = "launcher.tcss"
    TITLE = "Visual Pinball Launcher"

    BINDINGS = [
        Binding("ctrl+q", "quit_app", "Quit", show=True),
        Binding("p", "play", "Play", show=True),
        Binding("r", "rescan", "Rescan", show=True),
    ]

    def __init__(self, controller: SessionController, event_bus: EventBus):
        """Initialize the launcher UI.

        Args:
            controller: Session controller driving the application
            event_bus: Event bus the controller publishes on
        """
        super().__init__()
        self.controller = controller
        self.event_bus = event_bus
        self.playing: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="main"):
            yield ListView(id="tables")
            with Vertical(id="details"):
                yield Static("Hi Score:", id="score")
                yield SnapshotPanel(id="snapshot")
                yield Button("Play", id="play", variant="success")
        yield RichLog(id="log", markup=False, wrap=True)
        yield Footer()

    def on_mount(self) -> None:
        self.event_bus.subscribe(TablesScannedEvent, self.on_tables_scanned)
        self.event_bus.subscribe(TableSelectedEvent, self.on_table_selected)
        self.event_bus.subscribe(SessionStartedEvent, self.on_session_started)
        self.event_bus.subscribe(SessionFinishedEvent, self.on_session_finished)
        self.event_bus.subscribe(NotificationEvent, self.on_notification_event)
        self.event_bus.subscribe(LogEntryEvent, self.on_log_entry)

        self.run_worker(self.event_bus.process_events(), name="event_processor")
        self.query_one("#tables", ListView).border_title = "Tables"
        self.query_one("#snapshot", SnapshotPanel).clear_selection()

        self.controller.rescan()

    # ========================================================================
    # Event Handlers
    # ========================================================================

    async def on_tables_scanned(self, event: TablesScannedEvent) -> None:
        list_view = self.query_one("#tables", ListView)
        await list_view.clear()
        await list_view.extend(
            [ListItem(Label(table.display_title)) for table in event.tables]
        )
        self.query_one("#snapshot", SnapshotPanel).clear_selection()
        self.query_one("#score", Static).update("Hi Score:")

        if event.tables:
            list_view.index = 0
            self._select(0)

    async def on_table_selected(self, event: TableSelectedEvent) -> None:
        self.query_one("#score", Static).update(event.score.display_text())
        self.query_one("#snapshot", SnapshotPanel).show_selection(event)

    async def on_session_started(self, event: SessionStartedEvent) -> None:
        self.playing = event.table.display_title
        self.sub_title = f"Playing: {self.playing}"
        self.query_one("#play", Button).disabled = True

    async def on_session_finished(self, event: SessionFinishedEvent) -> None:
        self.playing = None
        self.sub_title = ""
        self.query_one("#play", Button).disabled = False

        if event.outcome.kind != OutcomeKind.FAILED:
            self.notify(f"{event.table.display_title}: {event.outcome.describe()}", timeout=4)
            # The table may have written a new high score
            current = self.controller.current_selection
            if current is not None:
                self._select(current.index)

    async def on_notification_event(self, event: NotificationEvent) -> None:
        self.notify(event.message, severity=event.severity, timeout=5)

    async def on_log_entry(self, event: LogEntryEvent) -> None:
        # Don't log here - creates infinite feedback loop
        try:
            log_widget = self.query_one("#log", RichLog)
        except Exception:
            return
        line = Text(f"{event.timestamp:%H:%M:%S} ", style="dim")
        line.append(event.message, style=LOG_LEVEL_STYLES.get(event.level, ""))
        log_widget.write(line)

    # ========================================================================
    # Widget messages and actions
    # ========================================================================

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None:
            self._select(index)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "play":
            self.action_play()

    def action_play(self) -> None:
        self.run_worker(self.controller.play(), name="session", group="session")

    def action_rescan(self) -> None:
        try:
            self.controller.rescan()
        except SessionBusyError as e:
            self.notify(str(e), severity="warning")

    def action_quit_app(self) -> None:
        if self.playing:
            self.notify(f"{self.playing} is still running", severity="warning")
            return
        self.exit()

    def _select(self, index: int) -> None:
        try:
            self.controller.select(index)
        except SessionBusyError as e:
            self.notify(str(e), severity="warning")
        except IndexError as e:
            logger.debug(f"Ignoring selection: {e}")
