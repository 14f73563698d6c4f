"""Error response models for consistent API error handling."""

from pydantic import BaseModel


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: str
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""


class ErrorResponse(BaseModel):
    """Standard error envelope: {"error": {"code": ..., "message": ...}}."""

    error: ErrorBody
