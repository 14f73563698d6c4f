"""Chat message models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One chat turn."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Turn author")
    text: str = Field(..., description="Turn content")
    created_at: datetime = Field(default_factory=utc_now, description="Append time")

    @model_validator(mode="after")
    def _user_text_not_blank(self) -> "Message":
        if self.role == Role.USER and not self.text.strip():
            raise ValueError("User messages must not be blank")
        return self
