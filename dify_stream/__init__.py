"""
Dify chat streaming client.

This package turns a Dify chat-messages SSE response into a typed,
cancellable in-process stream:
- Line framing and `data:` frame decoding into pydantic models
- A background pump per stream feeding a bounded delivery channel
- In-band delivery of I/O, decode and server-side errors
- Cooperative cancellation through an asyncio.Event
"""

from __future__ import annotations

from .client import DifyClient
from .config import Configuration
from .exceptions import (
    ChannelClosedError,
    DifyError,
    ServerErrorEvent,
    StreamDecodeError,
    StreamingError,
    StreamIOError,
    TransportError,
)
from .models import ChatMessageRequest, ResponseMode
from .streaming import (
    ChannelReceiver,
    DeliveryChannel,
    StreamEvent,
    StreamResult,
    WorkflowData,
    WorkflowInputs,
)

__all__ = [
    "ChannelClosedError",
    "ChannelReceiver",
    # Requests
    "ChatMessageRequest",
    "Configuration",
    # Streaming
    "DeliveryChannel",
    # Client
    "DifyClient",
    # Exceptions
    "DifyError",
    "ResponseMode",
    "ServerErrorEvent",
    "StreamDecodeError",
    "StreamEvent",
    "StreamIOError",
    "StreamResult",
    "StreamingError",
    "TransportError",
    "WorkflowData",
    "WorkflowInputs",
]
