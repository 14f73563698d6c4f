"""Request and response models for the HTTP surface."""

from policychat.api.models.errors import ErrorBody, ErrorResponse
from policychat.api.models.session import (
    ApiCallResponse,
    ChatRequest,
    ChatResult,
    MessageResponse,
    SessionResponse,
)

__all__ = [
    "ApiCallResponse",
    "ChatRequest",
    "ChatResult",
    "ErrorBody",
    "ErrorResponse",
    "MessageResponse",
    "SessionResponse",
]
