"""Queue-backed gesture event stream.

Producers (HTTP routes, or a recogniser thread via ``push_threadsafe``) push
raw events; the gesture loop consumes them with ``async for``.  Once closed a
stream stays exhausted: start a new instance to resume.
"""

from __future__ import annotations

import asyncio

from .models import RawGestureEvent

_CLOSED = object()


class StreamClosedError(RuntimeError):
    """Raised when pushing to a stream that has been closed."""


class QueueGestureStream:
    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: RawGestureEvent) -> None:
        if self._closed:
            raise StreamClosedError("gesture stream is closed")
        self._queue.put_nowait(event)

    def attach(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Remember the consuming loop so other threads can push."""
        self._loop = loop or asyncio.get_running_loop()

    def push_threadsafe(self, event: RawGestureEvent) -> None:
        if self._loop is None:
            raise RuntimeError("stream is not attached to an event loop")
        if self._closed:
            raise StreamClosedError("gesture stream is closed")
        self._loop.call_soon_threadsafe(self._enqueue, event)

    def _enqueue(self, event: RawGestureEvent) -> None:
        # The stream may have closed between the producer check and now.
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> QueueGestureStream:
        return self

    async def __anext__(self) -> RawGestureEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any later reader.
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item
