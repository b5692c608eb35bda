"""
Tests for the in-process change feed.
"""

import asyncio
from contextlib import aclosing

import pytest

from voicelog.core.persistence.change_feed import ChangeFeed
from voicelog.models import ChangeEvent, ChangeType


@pytest.mark.unit
@pytest.mark.asyncio
class TestChangeFeed:
    """Unit tests for ChangeFeed."""

    async def test_sync_and_async_callbacks_receive_events(self):
        feed = ChangeFeed()
        received_sync = []
        received_async = []

        async def on_change(event):
            received_async.append(event)

        feed.subscribe(received_sync.append)
        feed.subscribe(on_change)

        event = ChangeEvent(type=ChangeType.INSERT, note_id="note_1")
        await feed.publish(event)

        assert received_sync == [event]
        assert received_async == [event]

    async def test_unsubscribe_stops_delivery(self):
        feed = ChangeFeed()
        received = []
        subscription = feed.subscribe(received.append)

        assert subscription.active
        subscription.unsubscribe()
        assert not subscription.active

        await feed.publish(ChangeEvent(type=ChangeType.UPDATE, note_id="note_1"))
        assert received == []

    async def test_failing_subscriber_does_not_block_others(self):
        feed = ChangeFeed()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        feed.subscribe(broken)
        feed.subscribe(received.append)

        await feed.publish(ChangeEvent(type=ChangeType.DELETE, note_id="note_1"))

        assert len(received) == 1

    async def test_stream_yields_published_events(self):
        feed = ChangeFeed()
        collected = []

        async def consume():
            async with aclosing(feed.stream()) as events:
                async for event in events:
                    collected.append(event)
                    if len(collected) == 2:
                        break

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)  # let the consumer register its queue

        await feed.publish(ChangeEvent(type=ChangeType.INSERT, note_id="a"))
        await feed.publish(ChangeEvent(type=ChangeType.UPDATE, note_id="a"))
        await asyncio.wait_for(task, timeout=1.0)

        assert [e.type for e in collected] == [ChangeType.INSERT, ChangeType.UPDATE]
        assert feed.subscriber_count == 0

    async def test_clear_ends_open_streams(self):
        feed = ChangeFeed()
        collected = []

        async def consume():
            async for event in feed.stream():
                collected.append(event)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        await feed.publish(ChangeEvent(type=ChangeType.INSERT, note_id="a"))

        feed.clear()
        await asyncio.wait_for(task, timeout=1.0)

        assert [e.note_id for e in collected] == ["a"]
        assert feed.subscriber_count == 0

    async def test_full_stream_buffer_drops_oldest(self):
        feed = ChangeFeed(buffer_size=2)
        collected = []

        async def consume():
            async for event in feed.stream():
                collected.append(event)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)

        # publish does not yield without callbacks, so the consumer cannot drain in between
        for note_id in ("a", "b", "c"):
            await feed.publish(ChangeEvent(type=ChangeType.UPDATE, note_id=note_id))

        feed.clear()
        await asyncio.wait_for(task, timeout=1.0)

        assert [e.note_id for e in collected] == ["c"]
