"""Error taxonomy shared by the services, the HTTP layer and the client."""

from typing import Optional


class WeStudyError(Exception):
    """Base exception for the WeStudy backend."""

    status_code = 500
    code = "unexpected_error"
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(WeStudyError):
    """Malformed input, rejected before any side effect."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid input."


class AuthError(WeStudyError):
    """Missing, invalid, expired or revoked session."""

    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class ForbiddenError(WeStudyError):
    """Authenticated but not entitled."""

    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to perform this action."


class NotFoundError(WeStudyError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class ConflictError(WeStudyError):
    status_code = 409
    code = "conflict"
    default_message = "The request conflicts with the current state."


class ListingUnavailableError(ConflictError):
    code = "listing_unavailable"
    default_message = "This room is no longer available."


class UnexpectedError(WeStudyError):
    """Internal failure; the caller only ever sees the generic message."""


class IllegalTransitionError(WeStudyError):
    """Client-side action state machine was driven through a forbidden edge."""

    code = "illegal_transition"
    default_message = "Illegal state transition."


ERRORS_BY_STATUS = {
    400: ValidationError,
    401: AuthError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
}


def error_for_status(status_code: int, message: Optional[str] = None, code: Optional[str] = None) -> WeStudyError:
    """Rebuild a taxonomy error from an HTTP error response."""
    if code == ListingUnavailableError.code:
        return ListingUnavailableError(message)
    if status_code == 422:
        return ValidationError(message)
    error_cls = ERRORS_BY_STATUS.get(status_code, UnexpectedError)
    return error_cls(message)
