"""
Custom exceptions for the Movie Booking System.

Each exception carries an ``ErrorCode``; ``ErrorHandlerMiddleware`` maps the
code to an HTTP status and renders ``to_dict()`` as the response body.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorCode(str, Enum):
    """Error codes returned to API clients."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Booking flow
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Booking backend
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    BOOKING_SUBMISSION_FAILED = "BOOKING_SUBMISSION_FAILED"


class MovieBookingError(Exception):
    """
    Base exception class for the Movie Booking System.

    Subclasses set ``error_code`` and ``default_suggestions`` as class
    attributes; both can be overridden per instance.
    """

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_suggestions: Sequence[str] = ()

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[Sequence[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        self.suggestions = list(self.default_suggestions if suggestions is None else suggestions)

    def to_dict(self) -> Dict[str, Any]:
        """Body of the ``error`` member of an API error response."""
        body: Dict[str, Any] = {"error_code": self.error_code.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        if self.suggestions:
            body["suggestions"] = self.suggestions
        return body


class ValidationError(MovieBookingError):
    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None, **kwargs):
        super().__init__(message, details={"field_errors": field_errors} if field_errors else None, **kwargs)
        self.field_errors = field_errors or {}


class NotFoundError(MovieBookingError):
    error_code = ErrorCode.NOT_FOUND

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, **kwargs):
        details = {"resource_type": resource_type, "resource_id": resource_id} if resource_type else None
        super().__init__(message, details=details, **kwargs)


class MovieNotFoundError(NotFoundError):
    """The backend does not know the movie."""

    default_suggestions = ("Reload the movie list",)

    def __init__(self, movie_id: int, **kwargs):
        super().__init__(f"Movie {movie_id} not found", resource_type="movie", resource_id=str(movie_id), **kwargs)


class AuthenticationError(MovieBookingError):
    """Bad credentials, or a missing, invalid or ended session token."""

    error_code = ErrorCode.UNAUTHORIZED
    default_suggestions = ("Log in again",)

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, **kwargs)


class AuthorizationError(MovieBookingError):
    """The session may not use this endpoint."""

    error_code = ErrorCode.FORBIDDEN
    default_suggestions = ("Log in with the administrator account",)

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, **kwargs)


class BusinessLogicError(MovieBookingError):
    """Base exception for booking flow rule violations."""


class PreconditionFailedError(BusinessLogicError):
    """A flow action was attempted while its guard does not hold."""

    error_code = ErrorCode.PRECONDITION_FAILED

    def __init__(self, message: str, step: str, **kwargs):
        super().__init__(message, details={"step": step}, **kwargs)


class InvalidTransitionError(BusinessLogicError):
    """A booking context lacks what a step needs on entry."""

    error_code = ErrorCode.INVALID_TRANSITION

    def __init__(self, step: str, missing: List[str], **kwargs):
        super().__init__(
            f"Cannot enter {step}: missing {', '.join(missing)}",
            details={"step": step, "missing": missing},
            **kwargs
        )
        self.step = step
        self.missing = missing


class ExternalServiceError(MovieBookingError):
    """Base exception for failures of the booking backend."""

    default_suggestions = ("Try again later",)

    def __init__(self, service_name: str, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(
            f"{service_name} service error: {message}",
            details={"service_name": service_name, "status_code": status_code},
            **kwargs
        )
        self.status_code = status_code
        self.reason = message


class BackendUnavailableError(ExternalServiceError):
    """The backend could not be reached or answered unusably."""

    error_code = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__("booking backend", message, status_code=status_code, **kwargs)


class BookingSubmissionError(ExternalServiceError):
    """The backend did not create the booking."""

    error_code = ErrorCode.BOOKING_SUBMISSION_FAILED
    default_suggestions = ("Submit the payment again",)

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__("booking", message, status_code=status_code, **kwargs)
