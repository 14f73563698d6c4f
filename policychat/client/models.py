"""Wire models for the agent backend."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, RootModel


class StoreDocumentRequest(BaseModel):
    """Body of POST /input_data."""

    model_config = ConfigDict(frozen=True)

    created_object_name: str = Field(..., min_length=1)
    data_type: Literal["files"] = "files"
    input_data: list[str] = Field(..., min_length=1, description="Encoded documents")


class CreateAgentRequest(BaseModel):
    """Body of POST /create-agent."""

    instructions: str
    agent_name: str
    object_name: str | None = Field(
        default=None, description="Stored object the agent should read"
    )


class CreateAgentResponse(BaseModel):
    """Response of POST /create-agent."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    agent_id: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """Body of POST /chat."""

    agent_id: str
    message: str


class ChatResponse(BaseModel):
    """Response of POST /chat."""

    model_config = ConfigDict(extra="allow")

    response: str


class DeleteAckResponse(RootModel[dict[str, Any]]):
    """Response of DELETE /objects/{name}: any JSON object."""
