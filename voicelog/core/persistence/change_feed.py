"""
Change feed - fan-out of store invalidation events.

Subscribers are either callbacks (sync or async) or async iterators obtained from
``stream()``. Events are published after a write commits; delivery carries no diff.
"""

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable

from voicelog.models.events import ChangeEvent
from voicelog.utils.id_generator import generate_subscription_id
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)

# Events buffered per stream consumer before the oldest are dropped
STREAM_BUFFER_SIZE = 256

ChangeCallback = Callable[[ChangeEvent], Awaitable[None] | None]


class Subscription:
    """Handle returned by ``subscribe``; call ``unsubscribe`` to stop delivery."""

    def __init__(self, feed: "ChangeFeed", subscription_id: str):
        self.feed = feed
        self.id = subscription_id

    @property
    def active(self) -> bool:
        return self.feed.has_subscription(self.id)

    def unsubscribe(self) -> None:
        self.feed.unsubscribe(self.id)


class ChangeFeed:
    """In-process realtime channel for note changes."""

    def __init__(self, buffer_size: int = STREAM_BUFFER_SIZE):
        self.buffer_size = buffer_size
        self._callbacks: dict[str, ChangeCallback] = {}
        self._queues: set[asyncio.Queue] = set()

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """
        Register a callback invoked on every insert/update/delete.

        Args:
            callback: Function or coroutine function taking a ChangeEvent

        Returns:
            Subscription handle
        """
        subscription_id = generate_subscription_id()
        self._callbacks[subscription_id] = callback
        logger.debug(f"Change feed subscriber added: {subscription_id}")
        return Subscription(self, subscription_id)

    def unsubscribe(self, subscription_id: str) -> None:
        if self._callbacks.pop(subscription_id, None) is not None:
            logger.debug(f"Change feed subscriber removed: {subscription_id}")

    def has_subscription(self, subscription_id: str) -> bool:
        return subscription_id in self._callbacks

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks) + len(self._queues)

    async def stream(self) -> AsyncIterator[ChangeEvent]:
        """Yield events as they are published until the consumer stops or the feed is cleared."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.buffer_size)
        self._queues.add(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    return
                yield event
        finally:
            self._queues.discard(queue)

    async def publish(self, event: ChangeEvent) -> None:
        """
        Deliver an event to every subscriber.

        A failing callback is logged and skipped; it never fails the write that
        produced the event.
        """
        for queue in list(self._queues):
            self._offer(queue, event)

        for subscription_id, callback in list(self._callbacks.items()):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Change feed subscriber {subscription_id} failed: {e}",
                    extra={"subscription_id": subscription_id, "note_id": event.note_id},
                )

    def clear(self) -> None:
        """Drop all callback subscribers and end every open stream."""
        self._callbacks.clear()
        for queue in self._queues:
            # None ends the consumer's stream
            self._offer(queue, None)
        self._queues.clear()

    @staticmethod
    def _offer(queue: asyncio.Queue, item: ChangeEvent | None) -> None:
        if queue.full():
            # keep the newest events; consumers re-read the whole collection anyway
            queue.get_nowait()
            logger.warning("Change feed stream buffer full; dropped oldest event")
        queue.put_nowait(item)
