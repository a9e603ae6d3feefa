"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    PeerdexError,
    ConfigError,
    NotFoundError,
    ExternalServiceError,
)


class TestPeerdexError:
    def test_message(self):
        """PeerdexError should store message."""
        error = PeerdexError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_default_code(self):
        """PeerdexError should default code to class name."""
        assert PeerdexError("Test error").code == "PeerdexError"
        assert ConfigError("missing").code == "ConfigError"

    def test_custom_code_and_details(self):
        """PeerdexError should accept custom code and details."""
        error = PeerdexError("Test error", code="CUSTOM", details={"key": "value"})
        assert error.code == "CUSTOM"
        assert error.details == {"key": "value"}

    def test_to_dict(self):
        """PeerdexError should convert to dict."""
        result = PeerdexError("Test error", code="TEST_ERROR").to_dict()
        assert result == {"error": "TEST_ERROR", "message": "Test error", "details": {}}


class TestExternalServiceError:
    def test_records_service(self):
        """Service name should be kept as attribute and detail."""
        error = ExternalServiceError("down", service="intra")
        assert error.service == "intra"
        assert error.details["service"] == "intra"
        assert isinstance(error, PeerdexError)

    def test_not_found_is_peerdex_error(self):
        with pytest.raises(PeerdexError):
            raise NotFoundError("gone")
