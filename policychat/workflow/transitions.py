"""Pure workflow transitions.

Each function takes the current Session and returns a Transition with
the next Session and the effects the controller must carry out. None of
them perform I/O, so the whole state machine can be exercised without a
backend.
"""

from policychat.exceptions import ValidationError, WorkflowStateError
from policychat.workflow.models import (
    IN_FLIGHT_PHASES,
    CloseConversation,
    DeleteObject,
    OpenConversation,
    Phase,
    ProvisionAgent,
    Session,
    Transition,
)

STATUS_UPLOADING = "Uploading HR policies..."
STATUS_PROCESSING = "Processing document..."
STATUS_PROVISIONING = "Creating AI assistant..."
STATUS_COMPLETE = "Setup complete!"
STATUS_FAILED = "Error setting up chatbot. Please try again."

PROGRESS_ENCODED = 30
PROGRESS_STORED = 60
PROGRESS_PROVISIONED = 100


def _expect(session: Session, *phases: Phase, action: str) -> None:
    if session.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise WorkflowStateError(
            f"Cannot {action} while {session.phase.value}; allowed in: {allowed}"
        )


def start_upload(session: Session, mime_type: str, accepted_mime_type: str) -> Transition:
    """Idle -> Uploading.

    Raises:
        WorkflowStateError: If an upload is already running or chat is open
        ValidationError: If the document is not of the accepted type
    """
    _expect(session, Phase.IDLE, action="start an upload")
    if mime_type != accepted_mime_type:
        raise ValidationError(f"Please select a PDF file (got {mime_type or 'unknown type'})")

    return Transition(
        session.model_copy(
            update={
                "phase": Phase.UPLOADING,
                "stored_object_id": None,
                "agent_id": None,
                "progress": 0,
                "status_text": STATUS_UPLOADING,
            }
        )
    )


def document_encoded(session: Session) -> Transition:
    """The document was encoded for transport."""
    _expect(session, Phase.UPLOADING, action="record encoding")
    return Transition(
        session.model_copy(
            update={
                "progress": max(session.progress, PROGRESS_ENCODED),
                "status_text": STATUS_PROCESSING,
            }
        )
    )


def document_stored(session: Session, object_id: str) -> Transition:
    """Uploading -> Provisioning once the backend holds the document."""
    _expect(session, Phase.UPLOADING, action="record a stored document")
    return Transition(
        session.model_copy(
            update={
                "phase": Phase.PROVISIONING,
                "stored_object_id": object_id,
                "progress": max(session.progress, PROGRESS_STORED),
                "status_text": STATUS_PROVISIONING,
            }
        ),
        (ProvisionAgent(object_id=object_id),),
    )


def agent_provisioned(session: Session, agent_id: str) -> Transition:
    """The agent exists; the session stays in Provisioning until setup_ready."""
    _expect(session, Phase.PROVISIONING, action="record a provisioned agent")
    return Transition(
        session.model_copy(
            update={
                "agent_id": agent_id,
                "progress": PROGRESS_PROVISIONED,
                "status_text": STATUS_COMPLETE,
            }
        )
    )


def setup_ready(session: Session) -> Transition:
    """Provisioning -> Ready and open the conversation."""
    _expect(session, Phase.PROVISIONING, action="open the chat")
    if session.agent_id is None:
        raise WorkflowStateError("Cannot open the chat before an agent is provisioned")
    return Transition(
        session.model_copy(update={"phase": Phase.READY}),
        (OpenConversation(agent_id=session.agent_id),),
    )


def setup_failed(session: Session) -> Transition:
    """Uploading|Provisioning -> Idle after a remote failure.

    An already stored object is kept on the session so it can still be
    deleted.
    """
    _expect(session, *IN_FLIGHT_PHASES, action="record a setup failure")
    return Transition(
        session.model_copy(
            update={
                "phase": Phase.IDLE,
                "agent_id": None,
                "progress": 0,
                "status_text": STATUS_FAILED,
            }
        )
    )


def cancel(session: Session) -> Transition:
    """Uploading|Provisioning -> Idle; a no-op in any other phase.

    Remote calls already issued are not aborted and remote resources are
    not deleted; the bumped generation makes their results stale.
    """
    if session.phase not in IN_FLIGHT_PHASES:
        return Transition(session)

    return Transition(
        session.model_copy(
            update={
                "phase": Phase.IDLE,
                "agent_id": None,
                "progress": 0,
                "status_text": "",
                "generation": session.generation + 1,
            }
        )
    )


def delete(session: Session) -> Transition:
    """Ready -> Idle, deleting the stored document and clearing the chat.

    Also allowed from Idle when a failed or cancelled setup left a stored
    object behind.

    Raises:
        WorkflowStateError: While a setup is in flight, or when nothing
            is stored
    """
    _expect(session, Phase.READY, Phase.IDLE, action="delete")
    if session.stored_object_id is None:
        raise WorkflowStateError("Nothing to delete")

    return Transition(
        Session(generation=session.generation + 1),
        (CloseConversation(), DeleteObject(object_id=session.stored_object_id)),
    )
