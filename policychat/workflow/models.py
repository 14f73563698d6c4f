"""Session state and workflow effect models."""

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    """Workflow phase of the active session."""

    IDLE = "idle"
    UPLOADING = "uploading"
    PROVISIONING = "provisioning"
    READY = "ready"


# Phases during which an upload attempt is outstanding
IN_FLIGHT_PHASES = frozenset({Phase.UPLOADING, Phase.PROVISIONING})


class Session(BaseModel):
    """Snapshot of the single active workflow instance.

    Sessions are immutable; every transition returns a new one.
    generation is bumped by cancel and delete so results of calls issued
    under an older generation can be recognised and dropped.
    """

    model_config = ConfigDict(frozen=True)

    phase: Phase = Field(default=Phase.IDLE, description="Current phase")
    stored_object_id: str | None = Field(default=None, description="Stored document name")
    agent_id: str | None = Field(default=None, description="Provisioned agent")
    progress: int = Field(default=0, ge=0, le=100, description="Setup progress percent")
    status_text: str = Field(default="", description="Current step for display")
    generation: int = Field(default=0, ge=0, description="Cancel/delete counter")


class Document(BaseModel):
    """A document handed to the workflow for upload."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(default="document", description="Original file name")
    mime_type: str = Field(..., description="Declared content type")
    content: bytes = Field(..., repr=False, description="Raw document bytes")


class ProvisionAgent(BaseModel):
    """Create the agent for a stored document."""

    model_config = ConfigDict(frozen=True)

    object_id: str


class OpenConversation(BaseModel):
    """Bind the conversation to an agent and greet the user."""

    model_config = ConfigDict(frozen=True)

    agent_id: str


class DeleteObject(BaseModel):
    """Remove a stored document from the backend."""

    model_config = ConfigDict(frozen=True)

    object_id: str


class CloseConversation(BaseModel):
    """Clear the chat history."""

    model_config = ConfigDict(frozen=True)


Effect = ProvisionAgent | OpenConversation | DeleteObject | CloseConversation


class Transition(NamedTuple):
    """Result of a transition: the next session and the effects to perform."""

    session: Session
    effects: tuple[Effect, ...] = ()
