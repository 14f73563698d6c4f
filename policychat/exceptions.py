"""Exception hierarchy for policychat.

All errors inherit from PolicyChatError, which carries the status_code
and error_code used by the HTTP surface to build error responses.
"""

from typing import Any


class PolicyChatError(Exception):
    """Base exception for all policychat errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(PolicyChatError):
    """Raised when user input is rejected before any remote call is made."""

    status_code = 400
    error_code = "INVALID_REQUEST"


class WorkflowStateError(PolicyChatError):
    """Raised when an action is not allowed in the current phase."""

    status_code = 409
    error_code = "INVALID_PHASE"


class TransportError(PolicyChatError):
    """Raised when a remote call fails or returns an unusable response."""

    status_code = 502
    error_code = "BACKEND_ERROR"

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        endpoint: str | None = None,
        backend_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.endpoint = endpoint
        self.backend_status = backend_status
        self.details = details
