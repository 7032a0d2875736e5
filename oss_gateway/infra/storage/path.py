"""Object key helpers for S3 storage operations."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def get_file_extension(filename: str) -> str | None:
    """Extract file extension from filename.

    Returns the extension including the leading dot, or None if the filename
    has no extension.

    Example:
        ```python
        get_file_extension("report.pdf")      # ".pdf"
        get_file_extension("archive.tar.gz")  # ".gz"
        get_file_extension("README")          # None
        get_file_extension(".gitignore")      # None
        get_file_extension("draft.")          # None
        ```
    """
    name, dot, ext = filename.strip().rpartition(".")
    if not dot or not name or not ext:
        return None
    return f".{ext}"


def generate_date_key(extension: str, timestamp: datetime | None = None) -> str:
    """Generate a collision-free object key organized by UTC date.

    Path format: ``{YYYY}/{MM}/{DD}/{uuid4 hex}{extension}``

    Args:
        extension: File extension including the leading dot (e.g. ".pdf").
        timestamp: Optional timestamp (defaults to current UTC time).

    Returns:
        Generated object key.

    Example:
        ```python
        generate_date_key(".pdf")
        # "2025/11/25/550e8400e29b41d4a716446655440000.pdf"
        ```
    """
    if timestamp is None:
        timestamp = datetime.now(UTC)
    return f"{timestamp:%Y/%m/%d}/{uuid4().hex}{extension}"


def build_object_url(base_url: str | None, bucket: str, key: str) -> str:
    """Return ``{base_url}/{bucket}/{key}``, or the bare key without a base URL."""
    if base_url:
        return f"{base_url.rstrip('/')}/{bucket}/{key}"
    return key
