"""
Core middleware package.

This package provides the middleware components wired into the API:
- Error handling with sensitive data sanitization
- Structured logging with masking and request statistics
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    RequestStats,
    request_stats,
    setup_logging,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "RequestStats",
    "request_stats",
    "setup_logging",
]
