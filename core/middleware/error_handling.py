"""
Error handling for the API.

Every failure leaves the service as the same JSON envelope:

    {"error": {"code", "message", "path", "method", "details"?}}

Messages are scrubbed of credentials before they are returned or logged.
"""

import logging
import re
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from core.exceptions import AppError

logger = logging.getLogger(__name__)

# key=value style secrets that must never reach a client or a log line
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
]


def sanitize_error_message(message: str) -> str:
    """Replace anything that looks like a credential with [REDACTED]."""
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def get_safe_error_details(exc: Exception, include_details: bool = False) -> dict[str, Any]:
    """
    Describe an exception without leaking secrets.

    Args:
        exc: The exception to describe
        include_details: Add the formatted traceback (debug mode only)
    """
    details = {
        "type": type(exc).__name__,
        "message": sanitize_error_message(str(exc)),
    }
    if include_details:
        details["traceback"] = traceback.format_exc()
    return details


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic validation errors to field/message/type rows."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }
        for error in exc.errors()
    ]


@dataclass
class ErrorInfo:
    """What a failure looks like on the wire."""

    status_code: int
    code: str
    message: str
    details: Any = None


def classify_exception(exc: Exception, debug: bool = False) -> ErrorInfo:
    """
    Map an exception to its status, error code and client-safe message.

    Domain errors carry their own status. Database errors become 409/503/500
    with a generic message. Anything else is a 500.
    """
    if isinstance(exc, AppError):
        return ErrorInfo(exc.status_code, exc.code, sanitize_error_message(exc.message), exc.details)

    if isinstance(exc, StarletteHTTPException):
        return ErrorInfo(exc.status_code, "HTTP_EXCEPTION", sanitize_error_message(exc.detail))

    if isinstance(exc, RequestValidationError):
        return ErrorInfo(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            format_validation_errors(exc),
        )

    details = get_safe_error_details(exc, include_details=True) if debug else None

    if isinstance(exc, IntegrityError):
        return ErrorInfo(
            status.HTTP_409_CONFLICT, "INTEGRITY_ERROR", "Database integrity constraint violated", details
        )
    if isinstance(exc, OperationalError):
        return ErrorInfo(
            status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_ERROR", "Database service temporarily unavailable"
        )
    if isinstance(exc, SQLAlchemyError):
        return ErrorInfo(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "A database error occurred", details
        )
    return ErrorInfo(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "An unexpected error occurred", details
    )


def log_exception(exc: Exception, info: ErrorInfo, method: str, path: str) -> None:
    """Client errors log one line; server errors log the stack trace."""
    if isinstance(exc, SQLAlchemyError):
        # statements and bound parameters stay out of the log line
        logger.error(f"Database error: {method} {path} - {type(exc).__name__}", exc_info=exc)
    elif info.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {method} {path} - {sanitize_error_message(str(exc))}",
            exc_info=exc,
        )
    else:
        logger.warning(f"{type(exc).__name__}: {method} {path} - {info.message}")


def build_error_response(info: ErrorInfo, path: str, method: str) -> JSONResponse:
    """Render the error envelope."""
    content = {
        "error": {
            "code": info.code,
            "message": info.message,
            "path": path,
            "method": method,
        }
    }
    if info.details is not None:
        content["error"]["details"] = info.details
    return JSONResponse(status_code=info.status_code, content=content)


class ErrorHandlingMiddleware:
    """
    Outermost ASGI guard.

    Catches whatever escapes the routers and the other middleware and turns
    it into the error envelope, echoing the request id when one was sent.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Args:
            app: The ASGI application
            debug: Include tracebacks in error details
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            path = scope.get("path", "unknown")
            method = scope.get("method", "unknown")

            info = classify_exception(exc, self.debug)
            log_exception(exc, info, method, path)
            response = build_error_response(info, path, method)

            request_id = self._request_id(scope)
            if request_id:
                response.headers["x-request-id"] = request_id
            await response(scope, receive, send)

    @staticmethod
    def _request_id(scope: dict) -> Optional[str]:
        for name, value in scope.get("headers", []):
            if name == b"x-request-id":
                return value.decode()
        return None


def setup_error_handlers(app, debug: bool = False):
    """
    Register exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
        debug: Include tracebacks in error details
    """

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        info = classify_exception(exc, debug)
        log_exception(exc, info, request.method, request.url.path)
        return build_error_response(info, str(request.url.path), request.method)

    for exc_class in (AppError, StarletteHTTPException, RequestValidationError, SQLAlchemyError, Exception):
        app.add_exception_handler(exc_class, handle)
