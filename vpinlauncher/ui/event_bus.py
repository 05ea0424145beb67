"""Event bus for thread-safe UI updates.

The EventBus delivers events from the session controller to the UI layer
with publish-subscribe semantics. Handlers run inside the loop that drives
``process_events``; a failing handler never stops delivery to the others.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class EventBus:
    """Queue-backed event bus.

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe(TableSelectedEvent, lambda e: print(e.table.display_title))
        >>> await bus.publish(event)
    """

    def __init__(self):
        self._subscribers: dict[type, list[Callable]] = defaultdict(list)
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._processing: bool = False
        self._event_count: int = 0
        self._error_count: int = 0

    def subscribe(self, event_type: type, callback: Callable) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: The event class to subscribe to
            callback: Sync or async function called with each event
        """
        self._subscribers[event_type].append(callback)
        logger.debug(f"Subscribed to {event_type.__name__} (total subscribers: {len(self._subscribers[event_type])})")

    def unsubscribe(self, event_type: type, callback: Callable) -> None:
        """Unsubscribe from events of a specific type."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(callback)
                logger.debug(f"Unsubscribed from {event_type.__name__}")
            except ValueError:
                logger.warning(f"Callback not found for {event_type.__name__}")

    async def publish(self, event: Any) -> None:
        """Publish an event from async code."""
        await self._queue.put(event)

    def publish_sync(self, event: Any) -> None:
        """Publish an event from synchronous code or another thread.

        On the loop thread the event is queued immediately, keeping order
        with ``publish``. From other threads it is handed to the loop that
        runs ``process_events``, or dropped if none is running.
        """
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or running is self._loop):
            self._queue.put_nowait(event)
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._queue.put_nowait, event)

    async def process_events(self) -> None:
        """Process events from the queue until stopped or cancelled.

        Example:
            >>> app.run_worker(event_bus.process_events())
        """
        self._loop = asyncio.get_running_loop()
        self._processing = True
        logger.debug("Event bus processing started")

        try:
            while self._processing:
                event = await self._queue.get()
                event_type = type(event)
                self._event_count += 1

                for callback in list(self._subscribers.get(event_type, [])):
                    try:
                        if inspect.iscoroutinefunction(callback):
                            await callback(event)
                        else:
                            callback(event)
                    except Exception as e:
                        self._error_count += 1
                        logger.error(
                            f"Error in event handler for {event_type.__name__}: {e}",
                            exc_info=True
                        )

                self._queue.task_done()

        except asyncio.CancelledError:
            logger.debug("Event bus processing cancelled")
            raise
        finally:
            self._processing = False
            self._loop = None

    async def stop(self) -> None:
        """Stop processing events.

        Waits up to one second for pending events, then drops the rest.
        """
        self._processing = False

        try:
            await asyncio.wait_for(self._queue.join(), timeout=1.0)
        except asyncio.TimeoutError:
            remaining = self._queue.qsize()
            if remaining > 0:
                logger.warning(f"Event queue timeout - {remaining} events remaining, force draining")
                while not self._queue.empty():
                    try:
                        self._queue.get_nowait()
                        self._queue.task_done()
                    except asyncio.QueueEmpty:
                        break

        logger.debug(
            f"Event bus stopped. Processed {self._event_count} events "
            f"with {self._error_count} errors"
        )

    def get_stats(self) -> dict[str, int]:
        """Get event bus statistics."""
        return {
            'events_processed': self._event_count,
            'errors': self._error_count,
            'queue_size': self._queue.qsize(),
            'subscriber_count': sum(len(callbacks) for callbacks in self._subscribers.values())
        }

    @property
    def is_processing(self) -> bool:
        return self._processing
