"""Shared fixtures: scripted response bodies for streaming tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable

import httpx
import pytest

CHAT_URL = "https://api.dify.ai/v1/chat-messages"


class ScriptedByteStream(httpx.AsyncByteStream):
    """Response body that yields scripted chunks, raises scripted errors, or hangs."""

    def __init__(
        self,
        chunks: list[bytes | Exception],
        hang: asyncio.Event | None = None,
    ) -> None:
        self.chunks = chunks
        self.hang = hang
        self.close_count = 0
        self.chunks_read = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            self.chunks_read += 1
            yield chunk
        if self.hang is not None:
            await self.hang.wait()

    async def aclose(self) -> None:
        self.close_count += 1


def frame(payload: str) -> bytes:
    return f"data: {payload}\n".encode()


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Build an open streaming response over scripted chunks."""
    def factory(
        chunks: list[bytes | Exception], hang: asyncio.Event | None = None
    ) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            stream=ScriptedByteStream(chunks, hang),
            request=httpx.Request("POST", CHAT_URL),
        )
    return factory
