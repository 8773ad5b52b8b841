"""Centralized exception hierarchy and handlers for the application.

All errors raised by the analytics engine and the snapshot store come from
this hierarchy so the HTTP layer can map them to status codes in one place.

Exception Hierarchy:
    AppException (base)
    ├── ValidationError (400)
    ├── NotFoundError (404)
    ├── ConflictError (409)
    └── DataProviderError (503)

Warnings:
    InsufficientDataWarning - emitted (never raised) when some positions
    have no fundamental data. Computation continues and the coverage
    percentage reports the gap.

Usage in the engine:
    from lookthrough.core.exceptions import ValidationError

    if position.quantity < 0:
        raise ValidationError(f"Position {position.symbol}: quantity must be non-negative")

The exception handler automatically converts these to HTTP responses.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Base exception class for all application errors.

    Attributes:
        status_code: HTTP status code for this error type
        detail: User-facing error message
        error_code: Machine-readable error code (optional)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"
    error_code: str | None = None

    def __init__(
        self,
        detail: str | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            detail: Custom error message (overrides class default)
            error_code: Machine-readable error identifier
        """
        self.detail = detail or self.__class__.detail
        self.error_code = error_code or self.__class__.error_code
        super().__init__(self.detail)


class ValidationError(AppException):
    """
    Raised when a portfolio snapshot is invalid.

    Used for negative or non-finite quantities, prices, costs or cash, and
    for malformed snapshots (missing security, mismatched symbols).
    Computation is aborted and nothing partial is returned.
    Maps to HTTP 400 Bad Request.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Validation error"
    error_code = "VALIDATION_ERROR"


class NotFoundError(AppException):
    """
    Raised when a requested resource is not found.

    Maps to HTTP 404 Not Found.
    """

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    error_code = "NOT_FOUND"


class ConflictError(AppException):
    """
    Raised when input conflicts with itself or with stored state.

    Used, for example, when one update carries two different definitions
    of the same security.
    Maps to HTTP 409 Conflict.
    """

    status_code = status.HTTP_409_CONFLICT
    detail = "Resource conflict"
    error_code = "CONFLICT"


class DataProviderError(AppException):
    """
    Raised when the snapshot source fails.

    Covers storage and import failures upstream of the analytics engine.
    The engine itself performs no I/O and never raises this.
    Maps to HTTP 503 Service Unavailable.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Portfolio data unavailable"
    error_code = "DATA_PROVIDER_ERROR"


class InsufficientDataWarning(UserWarning):
    """Fundamental data is missing for some positions.

    Not an error: excluded positions are listed in the result and the
    coverage percentage reports the weighted fraction that was covered.
    """


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """
    Convert an application exception into a JSON error response.

    The body is ``{"detail": ..., "error_code": ...}``; ``error_code`` is
    omitted when the exception has none. Server-side failures (5xx) are
    logged at ERROR with the traceback, rejected input at WARNING.
    """
    server_error = exc.status_code >= 500
    logger.log(
        logging.ERROR if server_error else logging.WARNING,
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"{exc.__class__.__name__}: {exc.detail}",
        exc_info=server_error,
        extra={"error_code": exc.error_code},
    )

    content: dict[str, Any] = {"detail": exc.detail}
    if exc.error_code:
        content["error_code"] = exc.error_code
    return JSONResponse(status_code=exc.status_code, content=content)
