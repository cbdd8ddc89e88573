"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    ChatGateError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    DataStoreError,
)


class TestChatGateError:
    def test_message(self):
        """ChatGateError should store message."""
        error = ChatGateError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_default_code(self):
        """ChatGateError should default code to class name."""
        error = ChatGateError("Test error")
        assert error.code == "ChatGateError"

    def test_custom_code(self):
        error = ChatGateError("Test error", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_default_details(self):
        error = ChatGateError("Test error")
        assert error.details == {}

    def test_to_dict(self):
        """ChatGateError should convert to dict."""
        error = ChatGateError("Test error", code="TEST_ERROR", details={"key": "value"})
        result = error.to_dict()

        assert result["error"] == "TEST_ERROR"
        assert result["message"] == "Test error"
        assert result["details"]["key"] == "value"


@pytest.mark.parametrize(
    "error_class",
    [NotFoundError, ValidationError, AuthenticationError, AuthorizationError],
)
def test_subclasses_inherit_base(error_class):
    error = error_class("Something went wrong")
    assert isinstance(error, ChatGateError)
    assert error.code == error_class.__name__


class TestExternalServiceError:
    def test_stores_service(self):
        error = ExternalServiceError("Connection failed", service="resend")
        assert error.service == "resend"
        assert error.to_dict()["details"]["service"] == "resend"

    def test_preserves_other_details(self):
        error = ExternalServiceError(
            "Connection failed",
            service="resend",
            details={"status_code": 500}
        )
        result = error.to_dict()

        assert result["details"]["service"] == "resend"
        assert result["details"]["status_code"] == 500


class TestDataStoreError:
    def test_is_external_service_error(self):
        error = DataStoreError("timeout", operation="get_role")
        assert isinstance(error, ExternalServiceError)
        assert error.service == "supabase"

    def test_records_operation(self):
        error = DataStoreError("timeout", operation="get_role")
        assert error.operation == "get_role"
        assert error.details == {"operation": "get_role", "service": "supabase"}

    def test_default_and_custom_code(self):
        assert DataStoreError("x", operation="op").code == "DATA_STORE_ERROR"
        assert DataStoreError("x", operation="op", code="42P01").code == "42P01"
