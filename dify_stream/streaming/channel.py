"""
Single-producer/single-consumer delivery channel for stream results.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections import deque
from collections.abc import AsyncIterator

from ..exceptions import ChannelClosedError
from .models import StreamEvent, StreamResult


class DeliveryChannel:
    """
    Bounded async channel between the stream pump and its consumer.

    The producer blocks in send() while the buffer is full, so the pump never
    reads further ahead than ``capacity`` undelivered results. Closing never
    blocks; the consumer sees closure only after every sent result has been
    received.
    """

    def __init__(self, capacity: int = 1):
        if capacity < 1:
            raise ValueError("channel capacity must be at least 1")
        self._queue: asyncio.Queue[StreamResult] = asyncio.Queue(maxsize=capacity)
        # Results dequeued by a receive() that was cancelled before returning
        self._held: deque[StreamResult] = deque()
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send(self, result: StreamResult) -> None:
        """Send one result, waiting for buffer space."""
        if self.closed:
            raise ChannelClosedError("send on closed delivery channel")
        await self._queue.put(result)

    def close(self) -> None:
        """Mark the channel closed. Idempotent."""
        self._closed.set()

    async def receive(self) -> StreamResult | None:
        """
        Receive the next result.

        Returns:
            The next StreamResult, or None once the channel is closed and
            drained. Calls after that keep returning None immediately.
        """
        while True:
            if self._held:
                return self._held.popleft()
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self.closed:
                return None

            getter = asyncio.ensure_future(self._queue.get())
            closer = asyncio.ensure_future(self._closed.wait())
            try:
                await asyncio.wait(
                    [getter, closer], return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                closer.cancel()
                if not getter.done():
                    getter.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await getter
                if getter.done() and not getter.cancelled():
                    self._held.append(getter.result())

    def receiver(self) -> ChannelReceiver:
        """Receive-only view for the consumer."""
        return ChannelReceiver(self)

    def __aiter__(self) -> AsyncIterator[StreamResult]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[StreamResult]:
        while (result := await self.receive()) is not None:
            yield result

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield stream events, raising the in-band error if one arrives."""
        async for result in self:
            if result.error is not None:
                raise result.error
            yield result.event


class ChannelReceiver:
    """Consumer end of a DeliveryChannel; cannot send or close."""

    def __init__(self, channel: DeliveryChannel):
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel.closed

    async def receive(self) -> StreamResult | None:
        return await self._channel.receive()

    def __aiter__(self) -> AsyncIterator[StreamResult]:
        return self._channel.__aiter__()

    def events(self) -> AsyncIterator[StreamEvent]:
        return self._channel.events()
