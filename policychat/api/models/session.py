"""Views of the session, conversation and diagnostic log."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from policychat.audit import ApiCallRecord
from policychat.conversation import Message
from policychat.workflow import Phase, SessionController


class SessionResponse(BaseModel):
    """Current workflow state."""

    phase: Phase
    progress: int
    status_text: str
    stored_object_id: str | None
    agent_id: str | None
    awaiting_reply: bool

    @classmethod
    def from_controller(cls, controller: SessionController) -> "SessionResponse":
        session = controller.session
        return cls(
            phase=session.phase,
            progress=session.progress,
            status_text=session.status_text,
            stored_object_id=session.stored_object_id,
            agent_id=session.agent_id,
            awaiting_reply=controller.awaiting_reply,
        )


class MessageResponse(BaseModel):
    """One chat turn."""

    role: str
    text: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(role=message.role.value, text=message.text, created_at=message.created_at)


class ApiCallResponse(BaseModel):
    """One diagnostic log entry."""

    timestamp: datetime
    endpoint_path: str
    http_method: str
    request_payload: dict[str, Any]
    response_payload: Any
    status_code: int | None
    error: str | None
    latency_ms: float
    succeeded: bool

    @classmethod
    def from_record(cls, record: ApiCallRecord) -> "ApiCallResponse":
        return cls(**record.model_dump(), succeeded=record.succeeded)


class ChatRequest(BaseModel):
    """A user chat turn."""

    text: str = Field(..., max_length=8000)


class ChatResult(BaseModel):
    """Outcome of a chat submission.

    accepted is False when the input was dropped: blank text, a reply
    still outstanding, or no agent yet.
    """

    accepted: bool
    reply: MessageResponse | None = None
