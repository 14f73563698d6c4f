"""Async client for the document-aware agent backend.

Every attempted call is written to a DiagnosticLog before the client
returns or raises, so the log is a complete account of what was sent to
the backend and what came back.
"""

import time
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from policychat.audit import ApiCallRecord, DiagnosticLog
from policychat.client.encoding import encode_data_url, make_object_name
from policychat.client.models import (
    ChatRequest,
    ChatResponse,
    CreateAgentRequest,
    CreateAgentResponse,
    DeleteAckResponse,
    StoreDocumentRequest,
)
from policychat.config.models import BackendConfig
from policychat.exceptions import TransportError, ValidationError
from policychat.observability.logging import get_logger
from policychat.observability.metrics import REMOTE_CALL_LATENCY, REMOTE_CALLS

logger = get_logger(__name__)

STORE_PATH = "/input_data"
CREATE_AGENT_PATH = "/create-agent"
CHAT_PATH = "/chat"
OBJECT_PATH = "/objects/{object_name}"
RETURN_DATA_PATH = "/return_data/{object_name}"


class PolicyBackendClient:
    """Async client for the agent backend.

    Attributes:
        base_url: Base URL every endpoint path is appended to
        accepted_mime_type: The only document type store_document accepts
        object_name_prefix: Prefix of generated object names
    """

    def __init__(
        self,
        base_url: str,
        *,
        log: DiagnosticLog,
        token: str | None = None,
        timeout: float = 30.0,
        accepted_mime_type: str = "application/pdf",
        object_name_prefix: str = "hr_policies_",
        bind_object_on_provision: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the backend API
            log: Diagnostic log that receives a record per attempted call
            token: Static bearer credential
            timeout: Request timeout in seconds
            accepted_mime_type: The single accepted document type
            object_name_prefix: Prefix for generated object names
            bind_object_on_provision: Send the object name when creating agents
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.accepted_mime_type = accepted_mime_type
        self.object_name_prefix = object_name_prefix
        self.bind_object_on_provision = bind_object_on_provision
        self._log = log
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: BackendConfig,
        *,
        log: DiagnosticLog,
        accepted_mime_type: str = "application/pdf",
        object_name_prefix: str = "hr_policies_",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PolicyBackendClient":
        """Create a client from the backend configuration section."""
        return cls(
            base_url=config.base_url,
            log=log,
            token=config.api_token.get_secret_value() or None,
            timeout=config.timeout_seconds,
            accepted_mime_type=accepted_mime_type,
            object_name_prefix=object_name_prefix,
            bind_object_on_provision=config.bind_object_on_provision,
            transport=transport,
        )

    async def __aenter__(self) -> "PolicyBackendClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _record(
        self,
        method: str,
        path: str,
        route: str,
        payload: dict[str, Any],
        started: float,
        *,
        response_payload: Any = None,
        status_code: int | None = None,
        error: str | None = None,
    ) -> None:
        elapsed = time.perf_counter() - started
        self._log.record(
            ApiCallRecord(
                endpoint_path=path,
                http_method=method,
                request_payload=payload,
                response_payload=response_payload,
                status_code=status_code,
                error=error,
                latency_ms=elapsed * 1000,
            )
        )
        REMOTE_CALL_LATENCY.labels(endpoint=route, method=method).observe(elapsed)
        REMOTE_CALLS.labels(
            endpoint=route,
            method=method,
            outcome="error" if error else "success",
        ).inc()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        route: str | None = None,
        json: dict[str, Any] | None = None,
        accept_statuses: frozenset[int] = frozenset(),
        response_model: type[BaseModel] | None = None,
    ) -> Any:
        """Make an API request and record it.

        Args:
            method: HTTP method
            path: Endpoint path relative to base_url
            route: Path template used as the metrics label
            json: Request body
            accept_statuses: Error statuses treated as a clean response
            response_model: Model the response body must validate against

        Raises:
            TransportError: On connection failure, a non-success status
                outside accept_statuses, or an unparsable or unexpected body
        """
        route = route or path
        payload = json or {}
        started = time.perf_counter()

        try:
            response = await self._client.request(
                method=method,
                url=path,
                headers=self._headers(),
                json=json,
            )
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {e}"
            self._record(method, path, route, payload, started, error=error)
            logger.warning("remote_call_failed", method=method, endpoint=path, error=error)
            raise TransportError(
                f"{method} {path} failed: {error}", method=method, endpoint=path
            ) from e

        status = response.status_code
        if status == 204 or not response.content:
            data: Any = {}
        else:
            try:
                data = response.json()
            except ValueError:
                error = f"Unparsable response body (HTTP {status})"
                self._record(
                    method,
                    path,
                    route,
                    payload,
                    started,
                    response_payload=response.text,
                    status_code=status,
                    error=error,
                )
                logger.warning(
                    "remote_call_unparsable", method=method, endpoint=path, status_code=status
                )
                raise TransportError(
                    f"{method} {path}: {error}",
                    method=method,
                    endpoint=path,
                    backend_status=status,
                    details=response.text,
                ) from None

        if status >= 400 and status not in accept_statuses:
            message = _error_message(data) or response.reason_phrase or f"HTTP {status}"
            self._record(
                method,
                path,
                route,
                payload,
                started,
                response_payload=data,
                status_code=status,
                error=f"HTTP {status}: {message}",
            )
            logger.warning(
                "remote_call_rejected",
                method=method,
                endpoint=path,
                status_code=status,
                message=message,
            )
            raise TransportError(
                message,
                method=method,
                endpoint=path,
                backend_status=status,
                details=data,
            )

        if response_model is not None:
            try:
                result = response_model.model_validate(data)
            except PydanticValidationError as e:
                error = "Unexpected response shape: " + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                    for err in e.errors()
                )
                self._record(
                    method,
                    path,
                    route,
                    payload,
                    started,
                    response_payload=data,
                    status_code=status,
                    error=error,
                )
                logger.warning("remote_response_invalid", method=method, endpoint=path, error=error)
                raise TransportError(
                    f"{method} {path}: {error}",
                    method=method,
                    endpoint=path,
                    backend_status=status,
                    details=data,
                ) from e
            self._record(
                method,
                path,
                route,
                payload,
                started,
                response_payload=data,
                status_code=status,
            )
            return result

        self._record(
            method, path, route, payload, started, response_payload=data, status_code=status
        )
        return data

    # Documents
    def prepare_document(self, content: bytes, mime_type: str) -> StoreDocumentRequest:
        """Validate and encode a document for the store endpoint.

        Raises:
            ValidationError: If the type is not accepted or the content is empty
        """
        if mime_type != self.accepted_mime_type:
            raise ValidationError(
                f"Unsupported document type {mime_type!r}; expected {self.accepted_mime_type}"
            )
        if not content:
            raise ValidationError("Document is empty")

        return StoreDocumentRequest(
            created_object_name=make_object_name(self.object_name_prefix),
            input_data=[encode_data_url(content, mime_type)],
        )

    async def store_prepared(self, request: StoreDocumentRequest) -> str:
        """Store an already encoded document and return its object name."""
        await self._request("POST", STORE_PATH, json=request.model_dump())
        logger.info("document_stored", object_name=request.created_object_name)
        return request.created_object_name

    async def store_document(self, content: bytes, mime_type: str) -> str:
        """Encode and store a document, returning its object name."""
        return await self.store_prepared(self.prepare_document(content, mime_type))

    # Agents
    async def provision_agent(
        self,
        instructions: str,
        name: str,
        *,
        object_name: str | None = None,
    ) -> str:
        """Create an agent over the stored document and return its ID.

        The backend associates a new agent with the most recently stored
        object. object_name is only put on the wire when
        bind_object_on_provision is set.
        """
        payload = CreateAgentRequest(
            instructions=instructions,
            agent_name=name,
            object_name=object_name if self.bind_object_on_provision else None,
        )
        result = await self._request(
            "POST",
            CREATE_AGENT_PATH,
            json=payload.model_dump(exclude_none=True),
            response_model=CreateAgentResponse,
        )
        logger.info("agent_provisioned", agent_id=result.agent_id, object_name=object_name)
        return result.agent_id

    # Chat
    async def send_query(self, agent_id: str, text: str) -> str:
        """Send one chat turn to an agent and return the reply text."""
        payload = ChatRequest(agent_id=agent_id, message=text)
        result = await self._request(
            "POST", CHAT_PATH, json=payload.model_dump(), response_model=ChatResponse
        )
        return result.response

    # Objects
    async def delete_resource(self, object_name: str) -> dict[str, Any]:
        """Delete a stored object.

        A 404 means the object is already gone and counts as an
        acknowledgement.
        """
        result = await self._request(
            "DELETE",
            OBJECT_PATH.format(object_name=object_name),
            route=OBJECT_PATH,
            accept_statuses=frozenset({404}),
            response_model=DeleteAckResponse,
        )
        return result.root

    async def fetch_raw_data(self, object_name: str) -> Any:
        """Return the raw payload stored under object_name."""
        return await self._request(
            "GET",
            RETURN_DATA_PATH.format(object_name=object_name),
            route=RETURN_DATA_PATH,
        )


def _error_message(data: Any) -> str | None:
    if isinstance(data, dict):
        for key in ("error", "detail", "message"):
            value = data.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if isinstance(value, str) and value:
                return value
    return None

