"""Command-line entry point: stream one chat answer to stdout."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from .client import DifyClient
from .config import Configuration
from .exceptions import DifyError
from .logging_utils import configure_logging, operation_context
from .models import ChatMessageRequest


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dify-stream", description="Stream a Dify chat answer."
    )
    parser.add_argument("query", help="Message to send")
    parser.add_argument("--conversation-id", default="", help="Continue a conversation")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """Stream the answer for ``args.query``; returns the process exit code."""
    config = Configuration(args.config)
    configure_logging(config.get_logging_config())

    request = ChatMessageRequest(
        query=args.query,
        user=config.get_api_config()["user"],
        conversation_id=args.conversation_id,
    )

    cancel_event = asyncio.Event()

    def signal_handler() -> None:
        """Handle shutdown signals gracefully."""
        logging.info("Received shutdown signal, cancelling stream...")
        cancel_event.set()

    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, signal_handler)

    async with DifyClient.from_config(config) as client:
        try:
            async with operation_context("stream_answer"):
                channel = await client.chat_messages_stream(request, cancel_event)
                async for event in channel.events():
                    sys.stdout.write(event.answer)
                    sys.stdout.flush()
        except DifyError as e:
            sys.stdout.write("\n")
            sys.stderr.write(f"{e}\n")
            return 1

    sys.stdout.write("\n")
    return 0


def main() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
