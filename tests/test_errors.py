"""
Tests for error classification and user-facing messages.
"""

import pytest

from dashboard.core.exceptions import (
    DEFAULT_MESSAGES,
    ApiError,
    ErrorType,
    ForbiddenError,
    InvalidTransitionError,
    NetworkError,
    ServerError,
    classify_status,
    error_for_status,
    extract_payload_message,
    get_error_message,
    get_error_type,
)


class TestClassifyStatus:
    """HTTP status to ErrorType mapping."""

    @pytest.mark.parametrize(
        "status_code,expected",
        [
            (None, ErrorType.NETWORK),
            (401, ErrorType.UNAUTHORIZED),
            (403, ErrorType.FORBIDDEN),
            (404, ErrorType.NOT_FOUND),
            (422, ErrorType.VALIDATION),
            (500, ErrorType.SERVER),
            (502, ErrorType.SERVER),
            (503, ErrorType.SERVER),
            (504, ErrorType.SERVER),
            (400, ErrorType.UNKNOWN),
            (409, ErrorType.UNKNOWN),
            (501, ErrorType.UNKNOWN),
        ],
    )
    def test_mapping(self, status_code, expected):
        assert classify_status(status_code) == expected

    def test_error_for_status_builds_subclass(self):
        """The subclass matches the classified type."""
        error = error_for_status(403, {"message": "Nope"})
        assert isinstance(error, ForbiddenError)
        assert error.status_code == 403
        assert str(error) == "Nope"

    def test_default_message_without_payload(self):
        error = error_for_status(500, None)
        assert isinstance(error, ServerError)
        assert str(error) == DEFAULT_MESSAGES[ErrorType.SERVER]


class TestPayloadMessage:
    """Message extraction order: text, message, error, messages[0]."""

    def test_plain_text(self):
        assert extract_payload_message("Boom") == "Boom"

    def test_message_key_wins(self):
        assert extract_payload_message({"message": "A", "error": "B", "messages": ["C"]}) == "A"

    def test_error_key(self):
        assert extract_payload_message({"error": "B", "messages": ["C"]}) == "B"

    def test_first_of_messages(self):
        assert extract_payload_message({"messages": ["C", "D"]}) == "C"

    def test_nothing_usable(self):
        assert extract_payload_message({"messages": []}) is None
        assert extract_payload_message(None) is None


class TestGetErrorMessage:
    """Toast text for an exception."""

    def test_payload_message_preferred(self):
        error = ServerError(status_code=500, payload={"message": "Database is down"})
        assert get_error_message(error) == "Database is down"

    def test_default_for_type(self):
        assert get_error_message(NetworkError()) == DEFAULT_MESSAGES[ErrorType.NETWORK]

    def test_fallback_for_unknown_api_error(self):
        error = error_for_status(418)
        assert get_error_message(error, "Failed to save") == "Failed to save"

    def test_fallback_for_local_error(self):
        """Non-API errors never leak their own text."""
        error = InvalidTransitionError("internal detail")
        assert get_error_message(error, "Something failed") == "Something failed"
        assert get_error_type(error) == ErrorType.UNKNOWN

    def test_messages_property(self):
        error = ApiError(payload={"messages": ["one", 2]})
        assert error.messages == ["one", "2"]
