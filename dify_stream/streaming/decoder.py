"""
Classifies response lines into stream events, skips, end-of-stream and errors.
"""

from __future__ import annotations

from pydantic import ValidationError

from ..exceptions import ServerErrorEvent, StreamDecodeError
from .models import DecodedFrame, FrameKind, StreamEvent

DATA_PREFIX = b"data:"
ERROR_EVENT = "error"


class EventDecoder:
    """Stateless decoder for single `data:` frames."""

    def decode(self, line: bytes) -> DecodedFrame:
        """
        Decode one line from the response body.

        Lines without the ``data:`` prefix are keep-alives or comments and
        are skipped. A frame with an empty answer marks the end of the
        stream; it is not forwarded.

        Raises:
            StreamDecodeError: The frame payload is not a valid event.
        """
        if not line.startswith(DATA_PREFIX):
            return DecodedFrame(kind=FrameKind.SKIP)

        payload = line[len(DATA_PREFIX):].strip()
        try:
            event = StreamEvent.model_validate_json(payload)
        except ValidationError as e:
            raise StreamDecodeError(f"error unmarshalling event: {e}") from e

        if event.event == ERROR_EVENT:
            raw_frame = payload.decode("utf-8", errors="replace")
            return DecodedFrame(
                kind=FrameKind.ERROR_EVENT,
                error=ServerErrorEvent(raw_frame, response_data=event.model_dump()),
            )

        if event.answer == "":
            return DecodedFrame(kind=FrameKind.END_OF_STREAM, event=event)

        return DecodedFrame(kind=FrameKind.EVENT, event=event)
