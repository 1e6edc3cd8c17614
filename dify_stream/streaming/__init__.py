"""
Streaming pipeline for chat-messages responses.

- Frame reading over the response body
- `data:` frame decoding
- Background pump and delivery channel
"""

from __future__ import annotations

from .channel import ChannelReceiver, DeliveryChannel
from .decoder import EventDecoder
from .models import (
    DecodedFrame,
    FrameKind,
    PumpState,
    StreamEvent,
    StreamResult,
    WorkflowData,
    WorkflowInputs,
)
from .pump import StreamPump
from .reader import EndOfStream, FrameReader

__all__ = [
    "ChannelReceiver",
    "DecodedFrame",
    "DeliveryChannel",
    "EndOfStream",
    "EventDecoder",
    "FrameKind",
    "FrameReader",
    "PumpState",
    "StreamEvent",
    "StreamPump",
    "StreamResult",
    "WorkflowData",
    "WorkflowInputs",
]
