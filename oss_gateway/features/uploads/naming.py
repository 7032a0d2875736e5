"""Deterministic object keys for chunked-upload staging.

Every temporary object of a session lives under
``{RESERVED_PREFIX}/{upload_session_id}/{file_digest}/`` as
``{chunk_index}.part``. The session id is part of the prefix so two uploads
of byte-identical content never share temporary objects.
"""

from __future__ import annotations

from datetime import datetime

from oss_gateway.core.exceptions import InvalidArgumentException
from oss_gateway.infra.storage.path import generate_date_key, get_file_extension

RESERVED_PREFIX = ".chunk-uploads"
MIN_PART_SIZE = 5 * 1024 * 1024
CHUNK_SUFFIX = ".part"
COMPLETION_MARKER = ".completing"


def require_identifier(value: str, field: str) -> str:
    """Return ``value`` stripped, rejecting blanks and path separators."""
    value = (value or "").strip()
    if not value:
        raise InvalidArgumentException(f"{field} must not be blank", extra={"field": field})
    if "/" in value:
        raise InvalidArgumentException(
            f"{field} must not contain '/'", extra={"field": field}
        )
    return value


def require_extension(file_name: str) -> str:
    """Return the extension of ``file_name`` (with the dot) or raise."""
    if not file_name or not file_name.strip():
        raise InvalidArgumentException(
            "file_name must not be blank", extra={"field": "file_name"}
        )
    extension = get_file_extension(file_name)
    if extension is None:
        raise InvalidArgumentException(
            f"file_name '{file_name}' has no extension",
            extra={"field": "file_name"},
        )
    return extension


def count_chunks(total_size: int, chunk_size: int) -> int:
    """``ceil(total_size / chunk_size)`` without floating point."""
    return -(-total_size // chunk_size)


def session_prefix(upload_session_id: str) -> str:
    return f"{RESERVED_PREFIX}/{upload_session_id}/"


def chunk_prefix(upload_session_id: str, file_digest: str) -> str:
    return f"{RESERVED_PREFIX}/{upload_session_id}/{file_digest}/"


def digest_prefix(file_digest: str) -> str:
    """Prefix swept by a cancel that carries no session id."""
    return f"{RESERVED_PREFIX}/{file_digest}/"


def chunk_key(upload_session_id: str, file_digest: str, chunk_index: int) -> str:
    return f"{chunk_prefix(upload_session_id, file_digest)}{chunk_index}{CHUNK_SUFFIX}"


def completion_marker_key(upload_session_id: str) -> str:
    return f"{session_prefix(upload_session_id)}{COMPLETION_MARKER}"


def parse_chunk_index(key: str) -> int | None:
    """Return the chunk index encoded in ``key``.

    Returns None for keys that are not chunk objects, and for chunk
    objects whose index is not a non-negative integer.
    """
    if not key.endswith(CHUNK_SUFFIX):
        return None
    stem = key.rsplit("/", 1)[-1][: -len(CHUNK_SUFFIX)]
    if not (stem.isascii() and stem.isdigit()):
        return None
    return int(stem)


def is_chunk_key(key: str) -> bool:
    return key.endswith(CHUNK_SUFFIX)


def digest_of_key(key: str) -> str | None:
    """Return the digest segment of a chunk key, or None for other layouts."""
    parts = key.split("/")
    if len(parts) != 4 or parts[0] != RESERVED_PREFIX:
        return None
    return parts[2]


def final_object_key(file_name: str, timestamp: datetime | None = None) -> str:
    """Generate the key of a merged object: ``YYYY/MM/DD/<hex><ext>`` (UTC)."""
    return generate_date_key(require_extension(file_name), timestamp=timestamp)
