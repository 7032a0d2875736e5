"""Unit tests for botocore error mapping."""

import pytest
from botocore.exceptions import ClientError

from oss_gateway.infra.storage.exceptions import (
    StorageConflictError,
    StorageError,
    StorageFileNotFoundError,
    StoragePermissionError,
    StorageTimeoutError,
    StorageValidationError,
    client_error_code,
    map_boto_error,
)


def client_error(code: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": "boom"},
            "ResponseMetadata": {"RequestId": "req-1"},
        },
        "Operation",
    )


class TestMapBotoError:
    """Test AWS error codes map to typed storage errors."""

    @pytest.mark.parametrize(
        ("code", "expected", "status_code"),
        [
            ("NoSuchKey", StorageFileNotFoundError, 404),
            ("NoSuchBucket", StorageFileNotFoundError, 404),
            ("BucketAlreadyOwnedByYou", StorageConflictError, 409),
            ("PreconditionFailed", StorageConflictError, 409),
            ("AccessDenied", StoragePermissionError, 403),
            ("SlowDown", StorageTimeoutError, 504),
            ("EntityTooSmall", StorageValidationError, 400),
            ("MalformedPolicy", StorageValidationError, 400),
        ],
    )
    def test_known_codes(self, code, expected, status_code):
        """Test each known code gets its error class and status."""
        error = map_boto_error(client_error(code), operation="upload", key="k")

        assert type(error) is expected
        assert error.status_code == status_code

    def test_unknown_code_is_generic(self):
        """Test unrecognized codes become a 500 StorageError."""
        error = map_boto_error(client_error("InternalError"), operation="compose")

        assert type(error) is StorageError
        assert error.status_code == 500
        assert error.code == "STORAGE_ERROR"

    def test_context_is_kept(self):
        """Test the AWS context is attached for logging."""
        error = map_boto_error(client_error("NoSuchKey"), operation="download", key="a/b")

        assert error.extra["aws_error_code"] == "NoSuchKey"
        assert error.extra["request_id"] == "req-1"
        assert error.extra["key"] == "a/b"
        assert error.detail == "Download failed: boom"

    def test_client_error_code(self):
        """Test the code is read from the error response."""
        assert client_error_code(client_error("SlowDown")) == "SlowDown"
        assert client_error_code(ClientError({}, "Op")) == ""
