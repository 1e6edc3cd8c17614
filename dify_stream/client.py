"""
HTTP client for the Dify chat-messages streaming endpoint.
"""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from typing import Any

import httpx

from .config import Configuration
from .exceptions import TransportError
from .logging_utils import ContextualLogger, log_operation
from .models import ChatMessageRequest, ResponseMode
from .streaming.channel import ChannelReceiver, DeliveryChannel
from .streaming.pump import StreamPump
from .streaming.reader import FrameReader

CHAT_MESSAGES_PATH = "/v1/chat-messages"
HTTP_OK_RANGE = range(200, 300)


class DifyClient:
    """HTTP client for Dify chat streaming with in-band error delivery."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: httpx.Timeout | float = 30.0,
        channel_capacity: int = 1,
        treat_eof_as_completion: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be configured")

        self.base_url = base_url
        self.channel_capacity = channel_capacity
        self.treat_eof_as_completion = treat_eof_as_completion
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )
        self._pump_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls, configuration: Configuration, **kwargs: Any
    ) -> DifyClient:
        """Build a client from YAML configuration and environment."""
        api_config = configuration.get_api_config()
        http_config = configuration.get_http_client_config()
        streaming_config = configuration.get_streaming_config()

        timeout = httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=http_config["read_timeout"],
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )
        return cls(
            api_config["base_url"],
            configuration.api_key,
            timeout=timeout,
            channel_capacity=streaming_config["channel_capacity"],
            treat_eof_as_completion=streaming_config["treat_eof_as_completion"],
            **kwargs,
        )

    @log_operation("open_chat_stream", context={"path": CHAT_MESSAGES_PATH})
    async def chat_messages_stream_raw(
        self, request: ChatMessageRequest
    ) -> httpx.Response:
        """
        Open a streaming chat-messages response.

        Args:
            request: Fully built request; its response mode is forced to
                streaming.

        Returns:
            The open response with an unread body.

        Raises:
            TransportError: The connection failed or the server rejected the
                request before producing a body.
        """
        request.response_mode = ResponseMode.STREAMING

        http_request = self.client.build_request(
            "POST", CHAT_MESSAGES_PATH, json=request.to_payload()
        )
        try:
            response = await self.client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e!s}") from e

        if response.status_code not in HTTP_OK_RANGE:
            try:
                error_text = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError:
                error_text = ""
            finally:
                await response.aclose()
            raise TransportError(
                f"Streaming API error {response.status_code}: {error_text}",
                status_code=response.status_code,
                response_data={"body": error_text},
            )

        return response

    async def chat_messages_stream(
        self,
        request: ChatMessageRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> ChannelReceiver:
        """
        Start streaming a chat message into a delivery channel.

        The connection is opened before this returns, so transport failures
        raise here. Everything after that arrives in-band on the channel,
        which closes when the stream ends.
        """
        response = await self.chat_messages_stream_raw(request)

        stream_id = uuid.uuid4().hex[:12]
        channel = DeliveryChannel(self.channel_capacity)
        pump = StreamPump(
            FrameReader(response),
            channel,
            cancel_event or asyncio.Event(),
            treat_eof_as_completion=self.treat_eof_as_completion,
            logger=ContextualLogger({"stream_id": stream_id}),
        )

        task = asyncio.create_task(pump.run(), name=f"dify-stream-{stream_id}")
        self._pump_tasks.add(task)
        task.add_done_callback(self._pump_tasks.discard)
        return channel.receiver()

    async def close(self) -> None:
        """Stop in-flight pumps and close the HTTP client."""
        tasks = list(self._pump_tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.client.aclose()

    async def __aenter__(self) -> DifyClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
