"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status and error code it maps to, so the
handlers in core.middleware.error_handling can translate them without
knowing about individual services.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that are safe to surface to API clients."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ValidationError(AppError):
    """Raised when a request is structurally valid but semantically incomplete."""

    status_code = 400
    code = "INVALID_INPUT"


class InterviewStateError(AppError):
    """Raised when an operation is not allowed in the interview's current state."""

    status_code = 409
    code = "INVALID_STATE"


class ConcurrentUpdateError(AppError):
    """Raised when an interview was modified by another request in between."""

    status_code = 409
    code = "CONCURRENT_UPDATE"


class AuthenticationError(AppError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401
    code = "AUTHENTICATION_FAILED"


class PermissionDeniedError(AppError):
    """Raised when the caller is authenticated but not allowed to act."""

    status_code = 403
    code = "PERMISSION_DENIED"


class PayloadTooLargeError(AppError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


class ConflictError(AppError):
    """Raised when a record with the same unique key already exists."""

    status_code = 409
    code = "CONFLICT"
