"""Tests for application exceptions."""

from __future__ import annotations

from oss_gateway.core.exceptions import (
    AppException,
    ConflictException,
    InvalidArgumentException,
    NotFoundException,
    ServiceUnavailableException,
)


class TestAppException:
    """Test the Problem Details base exception."""

    def test_default_title(self):
        """Test the title is derived from the status code."""
        exc = AppException(status_code=507, detail="Bucket quota exceeded")

        assert exc.title == "Insufficient Storage"
        assert exc.type == "about:blank"
        assert exc.extra == {}
        assert str(exc) == "Bucket quota exceeded"

    def test_unknown_status_title(self):
        """Test unmapped status codes fall back to a generic title."""
        assert AppException(status_code=418, detail="teapot").title == "Error"


class TestSubclasses:
    """Test the concrete exceptions."""

    def test_invalid_argument_is_bad_request(self):
        """Test argument errors are 400s with their own type."""
        exc = InvalidArgumentException("file_name has no extension", extra={"file_name": "a"})

        assert exc.status_code == 400
        assert exc.type == "invalid-argument"
        assert exc.title == "Bad Request"
        assert exc.extra == {"file_name": "a"}

    def test_status_codes(self):
        """Test each exception maps to its HTTP status."""
        assert NotFoundException("missing").status_code == 404
        assert ConflictException("claimed").status_code == 409
        assert ServiceUnavailableException("down").status_code == 503

    def test_custom_type(self):
        """Test callers can refine the problem type."""
        exc = ConflictException("claimed", type="upload-completing")

        assert exc.type == "upload-completing"
        assert exc.title == "Conflict"
