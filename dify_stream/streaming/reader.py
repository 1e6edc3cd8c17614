"""
Line framing over a streaming httpx response body.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx

from ..exceptions import StreamIOError

LINE_TERMINATOR = b"\n"


class EndOfStream(Exception):
    """The response body is exhausted."""


class FrameReader:
    """
    Splits a response body into newline-terminated byte lines.

    Single pass: each next_line() call consumes one line. A trailing line
    without terminator is returned before EndOfStream is raised.
    """

    def __init__(self, response: httpx.Response, chunk_size: int | None = None):
        self._response = response
        self._chunks: AsyncIterator[bytes] = response.aiter_bytes(chunk_size)
        self._buffer = bytearray()
        self._exhausted = False
        self._closed = False

    async def next_line(self) -> bytes:
        """
        Read the next line, terminator included.

        Raises:
            EndOfStream: The body ended and no buffered data remains.
            StreamIOError: Reading from the connection failed.
        """
        while True:
            index = self._buffer.find(LINE_TERMINATOR)
            if index >= 0:
                line = bytes(self._buffer[: index + 1])
                del self._buffer[: index + 1]
                return line

            if self._exhausted:
                if self._buffer:
                    line = bytes(self._buffer)
                    self._buffer.clear()
                    return line
                raise EndOfStream

            try:
                chunk = await anext(self._chunks)
            except StopAsyncIteration:
                self._exhausted = True
                continue
            except (httpx.HTTPError, httpx.StreamError, OSError) as e:
                raise StreamIOError(f"error reading line: {e}") from e

            self._buffer.extend(chunk)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        while True:
            try:
                yield await self.next_line()
            except EndOfStream:
                return

    async def aclose(self) -> None:
        """Release the chunk iterator and close the response. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            aclose = getattr(self._chunks, "aclose", None)
            if aclose is not None:
                await aclose()
        finally:
            await self._response.aclose()
