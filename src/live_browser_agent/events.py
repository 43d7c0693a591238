"""Per-connection outbound event channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from .models import OutboundEvent

LOGGER = logging.getLogger(__name__)


class EventSink(Protocol):
    """Destination for events produced by the agent loop and frame stream."""

    async def publish(self, event: OutboundEvent) -> None:
        """Enqueue an event, waiting for room if necessary."""

    def offer(self, event: OutboundEvent) -> bool:
        """Enqueue an event only if there is room; return whether it was kept."""


class EventChannel:
    """Bounded FIFO queue shared by all producers of one connection.

    Status, result and error events are awaited into the queue and never
    dropped. Frames are offered and silently discarded while the queue is full.
    """

    def __init__(self, capacity: int = 256) -> None:
        self._queue: asyncio.Queue[Optional[OutboundEvent]] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def publish(self, event: OutboundEvent) -> None:
        if self._closed:
            LOGGER.debug("Discarding %s event on closed channel", event.type)
            return
        await self._queue.put(event)

    def offer(self, event: OutboundEvent) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    async def get(self) -> Optional[OutboundEvent]:
        """Return the next event, or ``None`` once the channel is closed and drained."""

        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def close(self) -> None:
        """Stop accepting events, discard pending ones and wake up the consumer.

        Draining also releases producers blocked on a full queue after the
        consumer has gone away.
        """

        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def qsize(self) -> int:
        return self._queue.qsize()
