"""
Request dataclasses for the Dify chat-messages endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResponseMode(Enum):
    """Response delivery modes supported by the chat-messages endpoint."""
    BLOCKING = "blocking"
    STREAMING = "streaming"


@dataclass
class ChatMessageRequest:
    """Complete chat-messages request structure."""
    query: str
    user: str
    inputs: dict[str, Any] = field(default_factory=dict)
    response_mode: ResponseMode = ResponseMode.BLOCKING
    conversation_id: str = ""
    files: list[dict[str, Any]] = field(default_factory=list)
    auto_generate_name: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON request body."""
        payload: dict[str, Any] = {
            "inputs": self.inputs,
            "query": self.query,
            "response_mode": self.response_mode.value,
            "conversation_id": self.conversation_id,
            "user": self.user,
            "auto_generate_name": self.auto_generate_name,
        }
        if self.files:
            payload["files"] = self.files
        return payload
