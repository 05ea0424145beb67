"""Unit tests for EventBus."""

import asyncio
import threading
from datetime import datetime

import pytest

from vpinlauncher.scanner.table_types import TableDescriptor
from vpinlauncher.ui.event_bus import EventBus
from vpinlauncher.ui.events import LogEntryEvent, NotificationEvent, SessionStartedEvent


class TestEventBus:
    """Test cases for EventBus."""

    @pytest.fixture
    def event_bus(self):
        return EventBus()

    @pytest.mark.asyncio
    async def test_subscribe_and_publish(self, event_bus):
        received = []
        event_bus.subscribe(NotificationEvent, received.append)
        task = asyncio.create_task(event_bus.process_events())

        event = NotificationEvent("Did not find table image file: viper.png")
        await event_bus.publish(event)
        await asyncio.sleep(0.1)

        await event_bus.stop()
        task.cancel()

        assert received == [event]

    @pytest.mark.asyncio
    async def test_events_routed_by_type(self, event_bus):
        notes = []
        started = []
        event_bus.subscribe(NotificationEvent, notes.append)
        event_bus.subscribe(SessionStartedEvent, started.append)
        task = asyncio.create_task(event_bus.process_events())

        table = TableDescriptor.from_filename("Viper.vpx")
        await event_bus.publish(SessionStartedEvent(table))
        await asyncio.sleep(0.1)

        await event_bus.stop()
        task.cancel()

        assert notes == []
        assert started[0].table is table

    @pytest.mark.asyncio
    async def test_async_handler_and_unsubscribe(self, event_bus):
        received = []

        async def handler(event):
            received.append(event.message)

        event_bus.subscribe(NotificationEvent, handler)
        task = asyncio.create_task(event_bus.process_events())

        await event_bus.publish(NotificationEvent("first"))
        await asyncio.sleep(0.05)
        event_bus.unsubscribe(NotificationEvent, handler)
        await event_bus.publish(NotificationEvent("second"))
        await asyncio.sleep(0.05)

        await event_bus.stop()
        task.cancel()

        assert received == ["first"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self, event_bus):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        event_bus.subscribe(NotificationEvent, broken)
        event_bus.subscribe(NotificationEvent, received.append)
        task = asyncio.create_task(event_bus.process_events())

        await event_bus.publish(NotificationEvent("still delivered"))
        await asyncio.sleep(0.1)

        await event_bus.stop()
        task.cancel()

        assert len(received) == 1
        assert event_bus.get_stats()['errors'] == 1

    @pytest.mark.asyncio
    async def test_publish_sync_keeps_order_with_publish(self, event_bus):
        received = []
        event_bus.subscribe(NotificationEvent, lambda e: received.append(e.message))
        task = asyncio.create_task(event_bus.process_events())

        event_bus.publish_sync(NotificationEvent("one"))
        await event_bus.publish(NotificationEvent("two"))
        event_bus.publish_sync(NotificationEvent("three"))
        await asyncio.sleep(0.1)

        await event_bus.stop()
        task.cancel()

        assert received == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_publish_sync_from_worker_thread(self, event_bus):
        received = []
        event_bus.subscribe(LogEntryEvent, received.append)
        task = asyncio.create_task(event_bus.process_events())
        await asyncio.sleep(0)

        event = LogEntryEvent(level=20, message="from thread", timestamp=datetime.now())
        worker = threading.Thread(target=event_bus.publish_sync, args=(event,))
        worker.start()
        worker.join()
        await asyncio.sleep(0.1)

        await event_bus.stop()
        task.cancel()

        assert received == [event]

    @pytest.mark.unit
    def test_publish_sync_without_loop_is_dropped(self, event_bus):
        event_bus.publish_sync(NotificationEvent("nobody listening"))

        assert event_bus.get_stats()['queue_size'] == 0

    @pytest.mark.asyncio
    async def test_stats(self, event_bus):
        event_bus.subscribe(NotificationEvent, lambda e: None)
        task = asyncio.create_task(event_bus.process_events())

        await event_bus.publish(NotificationEvent("a"))
        await event_bus.publish(NotificationEvent("b"))
        await asyncio.sleep(0.1)
        assert event_bus.is_processing

        await event_bus.stop()
        task.cancel()

        stats = event_bus.get_stats()
        assert stats['events_processed'] == 2
        assert stats['subscriber_count'] == 1
        assert not event_bus.is_processing
