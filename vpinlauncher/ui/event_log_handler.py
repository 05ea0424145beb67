"""Logging handler that forwards records to the event bus.

Lets the Textual UI show log output in its log pane instead of writing to
the terminal underneath it.
"""

import logging
from datetime import datetime

from vpinlauncher.ui.event_bus import EventBus
from vpinlauncher.ui.events import LogEntryEvent


class EventLogHandler(logging.Handler):
    """Log handler that publishes LogEntryEvent to the event bus.

    Example:
        >>> handler = EventLogHandler(event_bus)
        >>> handler.setFormatter(logging.Formatter('%(message)s'))
        >>> logging.root.addHandler(handler)
    """

    def __init__(self, event_bus: EventBus, level: int = logging.NOTSET):
        super().__init__(level)
        self.event_bus = event_bus
        self._event_count = 0

    def emit(self, record: logging.LogRecord) -> None:
        try:
            event = LogEntryEvent(
                level=record.levelno,
                message=self.format(record),
                timestamp=datetime.fromtimestamp(record.created)
            )
            self.event_bus.publish_sync(event)
            self._event_count += 1
        except Exception:
            self.handleError(record)

    def get_event_count(self) -> int:
        """Get the number of log events published."""
        return self._event_count
