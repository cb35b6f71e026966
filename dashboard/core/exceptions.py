"""
Error Taxonomy

Every failure of a backend call is classified from its HTTP status into an
ErrorType and raised as an ApiError subclass. The web layer turns these into
toast payloads; nothing is retried.

Usage:
    from dashboard.core.exceptions import ApiError, get_error_message

    try:
        await api.tables.create(...)
    except ApiError as exc:
        message = get_error_message(exc, "Failed to create table")

Version: 1.0.0
"""

from enum import Enum
from typing import Any, Optional


class ErrorType(str, Enum):
    """Error categories derived from the backend response."""
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SERVER = "server"
    UNKNOWN = "unknown"


DEFAULT_MESSAGES: dict[ErrorType, str] = {
    ErrorType.NETWORK: "Network error. Please check your connection.",
    ErrorType.UNAUTHORIZED: "You are not authorized to perform this action.",
    ErrorType.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorType.NOT_FOUND: "The requested resource was not found.",
    ErrorType.VALIDATION: "Validation error. Please check your input.",
    ErrorType.SERVER: "Server error. Please try again later.",
}


def classify_status(status_code: Optional[int]) -> ErrorType:
    """
    Map an HTTP status to an ErrorType.

    Args:
        status_code: Response status, or None when no response was received

    Returns:
        ErrorType: Classified error type
    """
    if status_code is None:
        return ErrorType.NETWORK
    if status_code == 401:
        return ErrorType.UNAUTHORIZED
    if status_code == 403:
        return ErrorType.FORBIDDEN
    if status_code == 404:
        return ErrorType.NOT_FOUND
    if status_code == 422:
        return ErrorType.VALIDATION
    if status_code in (500, 502, 503, 504):
        return ErrorType.SERVER
    return ErrorType.UNKNOWN


# =============================================================================
# EXCEPTIONS
# =============================================================================

class DashboardError(Exception):
    """Base class for dashboard errors."""
    pass


class ApiError(DashboardError):
    """
    A backend call failed.

    Attributes:
        status_code: HTTP status of the response (None for transport errors)
        error_type: Classified error type
        payload: Decoded response body (dict, str or None)
    """

    error_type: ErrorType = ErrorType.UNKNOWN

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message or DEFAULT_MESSAGES.get(self.error_type, "An error occurred"))
        self.status_code = status_code
        self.payload = payload

    @property
    def messages(self) -> list[str]:
        """Messages list from the response envelope, if any."""
        if isinstance(self.payload, dict):
            messages = self.payload.get("messages")
            if isinstance(messages, list):
                return [str(m) for m in messages]
        return []


class NetworkError(ApiError):
    error_type = ErrorType.NETWORK


class UnauthorizedError(ApiError):
    error_type = ErrorType.UNAUTHORIZED


class ForbiddenError(ApiError):
    error_type = ErrorType.FORBIDDEN


class NotFoundError(ApiError):
    error_type = ErrorType.NOT_FOUND


class ApiValidationError(ApiError):
    error_type = ErrorType.VALIDATION


class ServerError(ApiError):
    error_type = ErrorType.SERVER


class UnknownApiError(ApiError):
    error_type = ErrorType.UNKNOWN


_ERRORS_BY_TYPE: dict[ErrorType, type[ApiError]] = {
    ErrorType.NETWORK: NetworkError,
    ErrorType.UNAUTHORIZED: UnauthorizedError,
    ErrorType.FORBIDDEN: ForbiddenError,
    ErrorType.NOT_FOUND: NotFoundError,
    ErrorType.VALIDATION: ApiValidationError,
    ErrorType.SERVER: ServerError,
    ErrorType.UNKNOWN: UnknownApiError,
}


def error_for_status(status_code: Optional[int], payload: Any = None) -> ApiError:
    """
    Build the ApiError subclass matching a response.

    Args:
        status_code: HTTP status (None for transport failures)
        payload: Decoded response body

    Returns:
        ApiError: Instance of the classified subclass
    """
    error_type = classify_status(status_code)
    error_cls = _ERRORS_BY_TYPE[error_type]
    message = extract_payload_message(payload) or ""
    return error_cls(message, status_code=status_code, payload=payload)


class InvalidTransitionError(DashboardError):
    """A reservation status change is not allowed from the current status."""
    pass


class RestaurantRequiredError(DashboardError):
    """The screen needs a selected restaurant but none is selected."""
    pass


# =============================================================================
# USER-FACING MESSAGES
# =============================================================================

def extract_payload_message(payload: Any) -> Optional[str]:
    """
    Best-effort message from a response body.

    Order: plain string body, ``message``, ``error``, first of ``messages``.
    """
    if not payload:
        return None
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        if payload.get("message"):
            return str(payload["message"])
        if payload.get("error"):
            return str(payload["error"])
        messages = payload.get("messages")
        if isinstance(messages, list) and messages:
            return str(messages[0])
    return None


def get_error_type(error: BaseException) -> ErrorType:
    """Return the ErrorType of an exception (UNKNOWN for non-API errors)."""
    if isinstance(error, ApiError):
        return error.error_type
    return ErrorType.UNKNOWN


def get_error_message(error: BaseException, fallback_message: str = "An error occurred") -> str:
    """
    Get a user-friendly message for an error.

    Args:
        error: The error to describe
        fallback_message: Used when nothing more specific is known

    Returns:
        str: Message suitable for a toast
    """
    if not isinstance(error, ApiError):
        return fallback_message

    payload_message = extract_payload_message(error.payload)
    if payload_message:
        return payload_message

    return DEFAULT_MESSAGES.get(error.error_type, fallback_message)
