"""
Error types for Dify chat streaming.

Two families of failures exist:
- Transport errors, raised synchronously before any streaming starts
- Streaming errors, delivered in-band on the delivery channel
"""

from __future__ import annotations


class DifyError(Exception):
    """Base Dify client error with rich context."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class TransportError(DifyError):
    """The streaming connection could not be opened."""
    pass


class StreamingError(DifyError):
    """Failure after the stream has started."""
    pass


class StreamIOError(StreamingError):
    """Reading from an open connection failed or ended unexpectedly."""
    pass


class StreamDecodeError(StreamingError):
    """A data frame could not be parsed as a stream event."""
    pass


class ServerErrorEvent(StreamingError):
    """The server tagged a frame as an error."""

    def __init__(self, raw_frame: str, **kwargs):
        super().__init__(f"error streaming event: {raw_frame}", **kwargs)
        self.raw_frame = raw_frame


class ChannelClosedError(DifyError):
    """Attempt to send on a closed delivery channel."""
    pass
