"""
Streaming data model: decoded server frames and channel results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..exceptions import StreamingError


class _WireModel(BaseModel):
    """Frozen wire model; unknown fields ignored, null means zero value."""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class WorkflowInputs(_WireModel):
    """System inputs echoed back by workflow-backed apps."""
    sys_query: str = Field(default="", alias="sys.query")
    sys_files: list[Any] = Field(default_factory=list, alias="sys.files")
    sys_conversation_id: str = Field(default="", alias="sys.conversation_id")
    sys_user_id: str = Field(default="", alias="sys.user_id")
    sys_dialogue_count: int = Field(default=0, alias="sys.dialogue_count")
    sys_app_id: str = Field(default="", alias="sys.app_id")
    sys_workflow_id: str = Field(default="", alias="sys.workflow_id")
    sys_workflow_run_id: str = Field(default="", alias="sys.workflow_run_id")


class WorkflowData(_WireModel):
    id: str = ""
    workflow_id: str = ""
    sequence_number: int = 0
    inputs: WorkflowInputs = Field(default_factory=WorkflowInputs)
    created_at: int = 0


class StreamEvent(_WireModel):
    """One decoded server frame."""
    event: str = ""
    conversation_id: str = ""
    message_id: str = ""
    task_id: str = ""
    workflow_run_id: str = ""
    answer: str = ""
    created_at: int = 0
    data: WorkflowData = Field(default_factory=WorkflowData)


class FrameKind(Enum):
    """Classification of a single line from the response body."""
    SKIP = "skip"
    EVENT = "event"
    END_OF_STREAM = "end_of_stream"
    ERROR_EVENT = "error_event"


@dataclass(frozen=True)
class DecodedFrame:
    """Decoder output for one line."""
    kind: FrameKind
    event: StreamEvent | None = None
    error: StreamingError | None = None


@dataclass(frozen=True)
class StreamResult:
    """Either a stream event or the terminal failure, never both."""
    event: StreamEvent | None = None
    error: StreamingError | None = None

    def __post_init__(self) -> None:
        if (self.event is None) == (self.error is None):
            raise ValueError("StreamResult requires exactly one of event or error")

    @classmethod
    def of(cls, event: StreamEvent) -> StreamResult:
        return cls(event=event)

    @classmethod
    def failure(cls, error: StreamingError) -> StreamResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


class PumpState(Enum):
    """Stream pump states."""
    RUNNING = "running"
    DRAINING = "draining"    # Clean end of stream
    FAILED = "failed"        # Error delivered in-band
    CANCELLED = "cancelled"  # Caller aborted

    @property
    def is_final(self) -> bool:
        return self is not PumpState.RUNNING
