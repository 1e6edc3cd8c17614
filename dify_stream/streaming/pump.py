"""
Background pump that drives a streaming response into a delivery channel.
"""

from __future__ import annotations

import asyncio
import contextlib

import httpx

from ..exceptions import ChannelClosedError, StreamingError, StreamIOError
from ..logging_utils import ContextualLogger, StreamErrorHandler
from .channel import DeliveryChannel
from .decoder import EventDecoder
from .models import FrameKind, PumpState, StreamResult
from .reader import EndOfStream, FrameReader


class StreamPump:
    """
    Reads frames from one response and publishes results to one channel.

    The pump owns the reader (and with it the response) for its whole
    lifetime. Whatever the exit path, it closes the reader and then the
    channel, each exactly once.
    """

    def __init__(
        self,
        reader: FrameReader,
        channel: DeliveryChannel,
        cancel_event: asyncio.Event,
        *,
        decoder: EventDecoder | None = None,
        treat_eof_as_completion: bool = False,
        logger: ContextualLogger | None = None,
    ):
        self.reader = reader
        self.channel = channel
        self.cancel_event = cancel_event
        self.decoder = decoder or EventDecoder()
        self.treat_eof_as_completion = treat_eof_as_completion
        self.logger = logger or ContextualLogger()
        self.state = PumpState.RUNNING
        self.events_sent = 0

    async def run(self) -> PumpState:
        """Pump until a final state is reached, then clean up."""
        try:
            await self._pump()
        except asyncio.CancelledError:
            self._transition(PumpState.CANCELLED)
            raise
        except Exception as e:
            if self.state.is_final:
                self.logger.error(
                    "Pump error after final state",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            else:
                error = StreamingError(f"stream pump failed: {e}")
                error.__cause__ = e
                await self._fail(error)
        finally:
            await self._cleanup()
        return self.state

    async def _pump(self) -> None:  # noqa: PLR0911
        while True:
            if self.cancel_event.is_set():
                self._transition(PumpState.CANCELLED)
                return

            try:
                line = await self.reader.next_line()
            except EndOfStream:
                if self.treat_eof_as_completion:
                    self._transition(PumpState.DRAINING)
                    return
                await self._fail(
                    StreamIOError("error reading line: unexpected end of stream")
                )
                return
            except StreamIOError as e:
                await self._fail(e)
                return

            # A line read while cancellation fired is discarded.
            if self.cancel_event.is_set():
                self._transition(PumpState.CANCELLED)
                return

            self.logger.debug("read_line", line=line.decode("utf-8", errors="replace"))

            try:
                frame = self.decoder.decode(line)
            except StreamingError as e:
                await self._fail(e)
                return

            if frame.kind is FrameKind.SKIP:
                continue
            if frame.kind is FrameKind.ERROR_EVENT:
                await self._fail(frame.error)
                return
            if frame.kind is FrameKind.END_OF_STREAM:
                self._transition(PumpState.DRAINING)
                return

            if not await self._send(StreamResult.of(frame.event)):
                self._transition(PumpState.CANCELLED)
                return
            self.events_sent += 1

    async def _send(self, result: StreamResult) -> bool:
        """Send a result; False if cancellation fired or the channel was closed."""
        sender = asyncio.ensure_future(self.channel.send(result))
        canceller = asyncio.ensure_future(self.cancel_event.wait())
        try:
            await asyncio.wait(
                [sender, canceller], return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            canceller.cancel()
            if not sender.done():
                sender.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sender

        if sender.cancelled():
            return False
        try:
            sender.result()
        except ChannelClosedError:
            self.logger.info("Consumer closed the delivery channel")
            return False
        return True

    async def _fail(self, error: StreamingError) -> None:
        self._transition(PumpState.FAILED)
        self.logger.error(
            "Stream failed",
            error_type=type(error).__name__,
            error_category=StreamErrorHandler.classify_error(error),
            error_message=str(error),
        )
        if not await self._send(StreamResult.failure(error)):
            self.logger.info("Error result dropped, consumer is gone")

    def _transition(self, state: PumpState) -> None:
        if self.state.is_final:
            return
        self.logger.debug(
            "Pump state transition", from_state=self.state.value, to_state=state.value
        )
        self.state = state
        self.logger = self.logger.bind(state=state.value)

    async def _cleanup(self) -> None:
        try:
            await self.reader.aclose()
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            self.logger.warning(
                "Error closing stream connection",
                error_type=type(e).__name__,
                error_message=str(e),
            )
        finally:
            self.channel.close()
            self.logger.info(
                "Stream closed", final_state=self.state.value, events=self.events_sent
            )
