"""
Error handling middleware for the Movie Booking System.

Every exception escaping a route is rendered as::

    {"error": {"error_code", "message", "details", "suggestions"},
     "error_id": "<uuid>", "timestamp": "<iso8601>"}
"""

import logging
import traceback
from datetime import datetime, timezone
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError as PydanticValidationError

from ..utils.exceptions import (
    AuthenticationError,
    ErrorCode,
    ExternalServiceError,
    MovieBookingError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_MAP = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.PRECONDITION_FAILED: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.BACKEND_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.BOOKING_SUBMISSION_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def to_booking_error(exc: Exception, debug: bool = False) -> MovieBookingError:
    """Wrap anything that is not already a MovieBookingError."""
    if isinstance(exc, MovieBookingError):
        return exc
    if isinstance(exc, PydanticValidationError):
        field_errors = {}
        for item in exc.errors():
            field_errors.setdefault(".".join(str(loc) for loc in item["loc"]), []).append(item["msg"])
        return ValidationError("Request validation failed", field_errors=field_errors)
    return MovieBookingError(
        "An unexpected error occurred",
        details={"error_type": type(exc).__name__} if debug else None,
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Render exceptions as structured JSON errors."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return self._render(request, exc, str(uuid4()))

    def _render(self, request: Request, exc: Exception, error_id: str) -> JSONResponse:
        error = to_booking_error(exc, self.debug)
        status_code = STATUS_MAP.get(error.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self._log(request, exc, error, status_code, error_id)

        content = {
            "error": error.to_dict(),
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if self.debug and status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            content["debug"] = {"exception": str(exc), "traceback": traceback.format_exc()}

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    def _log(self, request: Request, exc: Exception, error: MovieBookingError, status_code: int, error_id: str):
        """Client errors at WARNING, backend and internal failures at ERROR."""
        extra = {
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "error_code": error.error_code.value,
        }
        if not isinstance(exc, MovieBookingError):
            logger.error(f"Unexpected error [{error_id}]: {exc!r}", extra=extra, exc_info=exc)
        elif isinstance(exc, ExternalServiceError) or status_code >= 500:
            logger.error(f"Backend error [{error_id}]: {error.message}", extra={**extra, "details": error.details})
        else:
            logger.warning(f"Client error [{error_id}]: {error.message}", extra={**extra, "details": error.details})
