"""Session endpoints: upload, cancel, chat, delete and diagnostics."""

from typing import Any

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from policychat.api.dependencies import ControllerDep, SettingsDep
from policychat.api.models import (
    ApiCallResponse,
    ChatRequest,
    ChatResult,
    MessageResponse,
    SessionResponse,
)
from policychat.exceptions import ValidationError
from policychat.observability.logging import get_logger
from policychat.workflow import Document

logger = get_logger(__name__)

router = APIRouter(prefix="/session")


@router.get("", response_model=SessionResponse)
async def get_session(controller: ControllerDep) -> SessionResponse:
    """Return phase, progress and status of the active session."""
    return SessionResponse.from_controller(controller)


@router.post(
    "/upload",
    response_model=SessionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_document(
    controller: ControllerDep,
    settings: SettingsDep,
    file: UploadFile = File(...),
) -> SessionResponse:
    """Start the upload -> provisioning setup for a policy document.

    The setup continues in the background; poll GET /v1/session for
    progress.
    """
    content = await file.read(settings.api.max_upload_bytes + 1)
    if len(content) > settings.api.max_upload_bytes:
        raise ValidationError(
            f"Document exceeds {settings.api.max_upload_bytes} bytes"
        )

    document = Document(
        filename=file.filename or "document",
        mime_type=file.content_type or "",
        content=content,
    )
    controller.launch_upload(document)
    return SessionResponse.from_controller(controller)


@router.post("/cancel", response_model=SessionResponse)
async def cancel_setup(controller: ControllerDep) -> SessionResponse:
    """Abandon an in-flight setup."""
    controller.cancel()
    return SessionResponse.from_controller(controller)


@router.delete("", response_model=SessionResponse)
async def delete_session(controller: ControllerDep) -> SessionResponse:
    """Delete the stored document and clear the conversation."""
    await controller.delete()
    return SessionResponse.from_controller(controller)


@router.get("/messages", response_model=list[MessageResponse])
async def list_messages(controller: ControllerDep) -> list[MessageResponse]:
    """Return the conversation in order."""
    return [MessageResponse.from_message(m) for m in controller.messages]


@router.post("/messages", response_model=ChatResult)
async def send_message(request: ChatRequest, controller: ControllerDep) -> ChatResult:
    """Send a chat turn and wait for the assistant's reply."""
    reply = await controller.submit(request.text)
    if reply is None:
        return ChatResult(accepted=False)
    return ChatResult(accepted=True, reply=MessageResponse.from_message(reply))


@router.get("/api-calls", response_model=list[ApiCallResponse])
async def list_api_calls(controller: ControllerDep) -> list[ApiCallResponse]:
    """Return the diagnostic log in call order."""
    return [ApiCallResponse.from_record(r) for r in controller.api_calls]


@router.get("/raw-data")
async def get_raw_data(controller: ControllerDep) -> Any:
    """Return the backend's raw copy of the stored document."""
    if controller.session.stored_object_id is None:
        raise HTTPException(status_code=404, detail="No document is stored")
    return await controller.fetch_raw_stored_data()
