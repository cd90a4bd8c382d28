"""Single-consumer event bus.

Hides how UI input, ticks and streamed answers are merged into one ordered
stream. Any number of producers may send; exactly one consumer (the main
loop) receives.
"""

import asyncio
import logging

from .models import Event

logger = logging.getLogger(__name__)

_CLOSED = object()


class EventBusClosed(Exception):
    """Raised by recv() once the bus has been closed and drained."""


class EventBus:
    """Unbounded FIFO channel from many producers to one consumer.

    send() never blocks and never raises. Events sent after close() are
    dropped, since by then the consumer is gone and producers are winding
    down. recv() returns events strictly in send order.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of events waiting to be received."""
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size

    def send(self, event: Event) -> None:
        """Queue an event for the consumer."""
        if self._closed:
            logger.debug("Dropping %r, event bus is closed", event)
            return
        self._queue.put_nowait(event)

    async def recv(self) -> Event:
        """Wait for the next event.

        Raises:
            EventBusClosed: If the bus was closed and every queued event has
                already been received.
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place so every later recv() fails too
            self._queue.put_nowait(_CLOSED)
            raise EventBusClosed("Event bus is closed")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop accepting events. Already queued events are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
