"""
Domain exceptions for the Tool Finder backend.

Services and the recommendation client raise these; routes translate them
into HTTPException responses with the standard detail shape:

    {"error": "<error_code>", "details": "<message or field list>"}
"""

from typing import Any, Optional


class ToolFinderError(Exception):
    """Base class for all domain errors."""

    error_code: str = "error"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_detail(self) -> dict[str, Any]:
        """Render as an HTTPException detail payload."""
        return {
            "error": self.error_code,
            "details": self.details if self.details is not None else self.message,
        }


class ValidationError(ToolFinderError):
    """Malformed input."""

    error_code = "validation_error"
    status_code = 400


class AuthError(ToolFinderError):
    """Missing or invalid session, or missing external API credential."""

    error_code = "unauthorized"
    status_code = 401


class ConflictError(ToolFinderError):
    """Unique resource already exists (e.g. username taken)."""

    error_code = "conflict"
    status_code = 409


class NotFoundError(ToolFinderError):
    """Resource absent or not owned by the caller."""

    error_code = "not_found"
    status_code = 404


class UpstreamError(ToolFinderError):
    """Gemini API returned a non-success status or timed out."""

    error_code = "upstream_error"
    status_code = 503

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        timeout: bool = False,
    ):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.timeout = timeout


class MalformedResponseError(ToolFinderError):
    """Gemini API succeeded but the response envelope has no candidate text."""

    error_code = "malformed_response"
    status_code = 502


class InternalError(ToolFinderError):
    """Unexpected failure. Only a generic message reaches the client."""

    error_code = "internal_error"
    status_code = 500
