"""ApiCallRecord model for the diagnostic log."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ApiCallRecord(BaseModel):
    """Immutable record of one attempted remote call.

    One record is created per attempt, whether the call succeeded,
    returned an error status, or never produced a response at all.
    When no usable response exists, response_payload is None and
    error holds the captured error text.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now, description="Attempt time")
    endpoint_path: str = Field(..., description="Path relative to the backend base URL")
    http_method: str = Field(..., description="HTTP method")
    request_payload: dict[str, Any] = Field(
        default_factory=dict, description="Request body as sent"
    )
    response_payload: Any = Field(
        default=None, description="Decoded response body, if any"
    )
    status_code: int | None = Field(default=None, description="HTTP status, if any")
    error: str | None = Field(default=None, description="Captured error text")
    latency_ms: float = Field(default=0.0, ge=0.0, description="Round-trip time")

    @property
    def succeeded(self) -> bool:
        """Whether the call produced a usable response."""
        return self.error is None
