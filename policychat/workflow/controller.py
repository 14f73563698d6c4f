"""Session workflow controller.

Drives the Session through the pure transitions in
policychat.workflow.transitions and carries out the effects they return:
remote calls through the backend client and updates of the conversation.

Cancellation is cooperative. cancel() and delete() bump the session
generation; every remote result is checked against the generation it was
issued under and silently dropped once the session has moved on.
"""

import asyncio
from collections.abc import Iterable

import httpx

from policychat.audit import ApiCallRecord, DiagnosticLog
from policychat.client import PolicyBackendClient, StoreDocumentRequest
from policychat.config import Settings
from policychat.config.models import WorkflowConfig
from policychat.conversation import ConversationManager, Message
from policychat.exceptions import TransportError
from policychat.observability.logging import get_logger
from policychat.observability.metrics import STALE_RESULTS, WORKFLOW_TRANSITIONS
from policychat.workflow import transitions
from policychat.workflow.models import (
    CloseConversation,
    DeleteObject,
    Document,
    Effect,
    OpenConversation,
    Phase,
    ProvisionAgent,
    Session,
    Transition,
)

logger = get_logger(__name__)


class SessionController:
    """Top-level state machine for the single active session.

    Exposes the presented surface: phase, progress, status text, the
    message list and the diagnostic log, plus the start_upload, cancel,
    submit, delete and fetch_raw_stored_data actions.
    """

    def __init__(
        self,
        client: PolicyBackendClient,
        log: DiagnosticLog,
        config: WorkflowConfig | None = None,
    ) -> None:
        self._client = client
        self._log = log
        self._config = config or WorkflowConfig()
        self._session = Session()
        self._conversation = ConversationManager(
            client, error_reply=self._config.chat_error_reply
        )
        self._tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SessionController":
        """Build a controller, its diagnostic log and backend client from settings."""
        log = DiagnosticLog()
        client = PolicyBackendClient.from_config(
            settings.backend,
            log=log,
            accepted_mime_type=settings.workflow.accepted_mime_type,
            object_name_prefix=settings.workflow.object_name_prefix,
            transport=transport,
        )
        return cls(client, log, settings.workflow)

    # Presented state
    @property
    def session(self) -> Session:
        return self._session

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def progress(self) -> int:
        return self._session.progress

    @property
    def status_text(self) -> str:
        return self._session.status_text

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._conversation.messages

    @property
    def awaiting_reply(self) -> bool:
        return self._conversation.awaiting_reply

    @property
    def api_calls(self) -> tuple[ApiCallRecord, ...]:
        return self._log.snapshot()

    # Actions
    async def start_upload(self, document: Document) -> Session:
        """Run the whole setup for a document and return the resulting session.

        Raises:
            ValidationError: If the document is rejected; nothing changes
            WorkflowStateError: If the session is not idle
        """
        token, request = self._begin_upload(document)
        await self._run_upload(request, token)
        return self._session

    def launch_upload(self, document: Document) -> "asyncio.Task[None]":
        """Validate synchronously, then run the setup in a background task.

        Raises:
            ValidationError: If the document is rejected; nothing changes
            WorkflowStateError: If the session is not idle
        """
        token, request = self._begin_upload(document)
        task = asyncio.create_task(self._run_upload(request, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel(self) -> Session:
        """Return to idle from an in-flight setup. No-op in other phases."""
        previous = self._session
        self._commit(transitions.cancel(previous))
        if self._session is not previous:
            logger.info("setup_cancelled", generation=self._session.generation)
        return self._session

    async def delete(self) -> Session:
        """Delete the stored document and return to idle.

        The remote delete is best effort; the session is idle afterwards
        whatever the backend answers.

        Raises:
            WorkflowStateError: While a setup is in flight or nothing is stored
        """
        transition = transitions.delete(self._session)
        self._commit(transition)
        await self._run_effects(transition.effects, self._session.generation)
        return self._session

    async def submit(self, text: str) -> Message | None:
        """Send a chat turn; see ConversationManager.submit."""
        return await self._conversation.submit(text)

    async def fetch_raw_stored_data(self) -> object | None:
        """Return what the backend holds for the stored document, if any."""
        if self._session.stored_object_id is None:
            return None
        return await self._client.fetch_raw_data(self._session.stored_object_id)

    async def close(self) -> None:
        """Stop background setups and close the backend client."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self._client.close()

    # Internals
    def _begin_upload(self, document: Document) -> tuple[int, StoreDocumentRequest]:
        transition = transitions.start_upload(
            self._session, document.mime_type, self._config.accepted_mime_type
        )
        request = self._client.prepare_document(document.content, document.mime_type)

        if self._session.stored_object_id is not None:
            logger.warning(
                "stored_object_abandoned", object_name=self._session.stored_object_id
            )

        self._commit(transition)
        self._commit(transitions.document_encoded(self._session))
        logger.info(
            "upload_started",
            filename=document.filename,
            size_bytes=len(document.content),
            object_name=request.created_object_name,
            generation=self._session.generation,
        )
        return self._session.generation, request

    async def _run_upload(self, request: StoreDocumentRequest, token: int) -> None:
        try:
            object_id = await self._client.store_prepared(request)
        except TransportError as e:
            self._fail(token, "store", e)
            return

        if not self._is_current(token, "store"):
            return

        transition = transitions.document_stored(self._session, object_id)
        self._commit(transition)
        await self._run_effects(transition.effects, token)

    async def _provision(self, effect: ProvisionAgent, token: int) -> None:
        try:
            agent_id = await self._client.provision_agent(
                self._config.agent_instructions,
                self._config.agent_name,
                object_name=effect.object_id,
            )
        except TransportError as e:
            self._fail(token, "provision", e)
            return

        if not self._is_current(token, "provision"):
            return

        self._commit(transitions.agent_provisioned(self._session, agent_id))

        if self._config.ready_delay_seconds:
            await asyncio.sleep(self._config.ready_delay_seconds)
        if not self._is_current(token, "ready"):
            return

        transition = transitions.setup_ready(self._session)
        self._commit(transition)
        await self._run_effects(transition.effects, token)

    async def _delete_object(self, object_id: str) -> None:
        try:
            await self._client.delete_resource(object_id)
        except TransportError as e:
            logger.warning("object_delete_failed", object_name=object_id, error=e.message)
        else:
            logger.info("object_deleted", object_name=object_id)

    async def _run_effects(self, effects: Iterable[Effect], token: int) -> None:
        for effect in effects:
            if isinstance(effect, ProvisionAgent):
                await self._provision(effect, token)
            elif isinstance(effect, OpenConversation):
                self._conversation.open(effect.agent_id, self._config.greeting)
            elif isinstance(effect, CloseConversation):
                self._conversation.reset()
            elif isinstance(effect, DeleteObject):
                await self._delete_object(effect.object_id)

    def _commit(self, transition: Transition) -> None:
        previous = self._session
        self._session = transition.session
        if previous.phase != self._session.phase:
            WORKFLOW_TRANSITIONS.labels(
                from_phase=previous.phase.value, to_phase=self._session.phase.value
            ).inc()
            logger.info(
                "phase_changed",
                from_phase=previous.phase.value,
                to_phase=self._session.phase.value,
                progress=self._session.progress,
                generation=self._session.generation,
            )

    def _is_current(self, token: int, step: str) -> bool:
        if token == self._session.generation:
            return True
        STALE_RESULTS.labels(step=step).inc()
        logger.info(
            "stale_result_discarded",
            step=step,
            token=token,
            generation=self._session.generation,
        )
        return False

    def _fail(self, token: int, step: str, error: TransportError) -> None:
        if not self._is_current(token, step):
            return
        logger.warning(
            "setup_failed",
            step=step,
            error=error.message,
            backend_status=error.backend_status,
        )
        self._commit(transitions.setup_failed(self._session))
