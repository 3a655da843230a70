"""
Bounded in-process channel for progress events.

The producer (analysis pipeline or search service) publishes without ever
blocking or raising; the transport layer drains it with `async for`.
Iteration ends right after the terminal event passed to `close()`.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT")


class ProgressChannel(Generic[EventT]):
    """Single-producer, single-consumer event queue with a guaranteed final event."""

    def __init__(self, maxsize: int = 64) -> None:
        self._queue: asyncio.Queue[EventT] = asyncio.Queue(maxsize=max(1, maxsize))
        self._terminal: EventT | None = None
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: EventT) -> None:
        """Enqueue an event if there is room; otherwise drop it."""
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Progress queue full, dropped event ({self.dropped} so far)")
        except Exception as e:
            logger.warning(f"Failed to publish progress event: {e}")

    def close(self, terminal: EventT) -> None:
        """Enqueue the terminal event, evicting the oldest event if the queue is full.

        Only the first call has any effect.
        """
        if self._closed:
            return
        self._closed = True
        self._terminal = terminal
        while True:
            try:
                self._queue.put_nowait(terminal)
                return
            except asyncio.QueueFull:
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except asyncio.QueueEmpty:
                    pass

    async def __aiter__(self) -> AsyncIterator[EventT]:
        while True:
            event = await self._queue.get()
            yield event
            if self._closed and event is self._terminal:
                return
