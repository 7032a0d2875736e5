"""Upload progress derived from the object store.

The tracker keeps no state of its own: the chunk objects under a session's
prefix are the source of truth, and every call reconstructs progress by
listing them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from oss_gateway.core.services.base import BaseService

from .naming import (
    RESERVED_PREFIX,
    chunk_prefix,
    digest_of_key,
    is_chunk_key,
    parse_chunk_index,
)
from .results import SessionStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from oss_gateway.infra.storage.service import StorageService


class UploadSessionTracker(BaseService):
    """Lists and interprets the chunk objects of upload sessions."""

    def __init__(self, storage: StorageService) -> None:
        super().__init__()
        self._storage = storage

    async def list_uploaded_chunks(
        self,
        upload_session_id: str,
        file_digest: str,
        bucket: str | None = None,
    ) -> list[int]:
        """Return the distinct chunk indices stored for a session, ascending.

        Keys under the prefix that are not ``<index>.part`` objects directly
        below it are logged and skipped.
        """
        prefix = chunk_prefix(upload_session_id, file_digest)
        indices: set[int] = set()

        async for obj in self._storage.stream_objects(prefix, bucket):
            if not is_chunk_key(obj.key):
                continue
            relative = obj.key[len(prefix) :]
            index = None if "/" in relative else parse_chunk_index(relative)
            if index is None:
                self.logger.warning(
                    "Skipping malformed chunk key",
                    extra={"key": obj.key, "upload_session_id": upload_session_id},
                )
                continue
            indices.add(index)

        return sorted(indices)

    @staticmethod
    def is_complete(uploaded: Iterable[int], total_chunks: int) -> bool:
        """True when every index in ``[0, total_chunks)`` is present."""
        if total_chunks <= 0:
            return False
        return set(range(total_chunks)).issubset(uploaded)

    @staticmethod
    def missing_chunks(uploaded: Iterable[int], total_chunks: int) -> list[int]:
        present = set(uploaded)
        return [index for index in range(max(total_chunks, 0)) if index not in present]

    async def session_status(
        self,
        upload_session_id: str,
        file_digest: str,
        bucket: str | None = None,
    ) -> SessionStatus:
        """Status of one session when the caller does not know ``total_chunks``.

        ``total_chunks`` is inferred as the highest stored index plus one.
        """
        uploaded = await self.list_uploaded_chunks(upload_session_id, file_digest, bucket)
        total_chunks = uploaded[-1] + 1 if uploaded else 0
        return SessionStatus(
            file_digest=file_digest,
            upload_session_id=upload_session_id,
            total_chunks=total_chunks,
            uploaded_chunks=uploaded,
            is_completed=self.is_complete(uploaded, total_chunks),
        )

    async def digest_status(self, file_digest: str, bucket: str | None = None) -> SessionStatus:
        """Status across every session that staged chunks for ``file_digest``."""
        indices: set[int] = set()

        async for obj in self._storage.stream_objects(f"{RESERVED_PREFIX}/", bucket):
            if not is_chunk_key(obj.key) or digest_of_key(obj.key) != file_digest:
                continue
            index = parse_chunk_index(obj.key)
            if index is None:
                self.logger.warning("Skipping malformed chunk key", extra={"key": obj.key})
                continue
            indices.add(index)

        uploaded = sorted(indices)
        total_chunks = uploaded[-1] + 1 if uploaded else 0
        return SessionStatus(
            file_digest=file_digest,
            total_chunks=total_chunks,
            uploaded_chunks=uploaded,
            is_completed=self.is_complete(uploaded, total_chunks),
        )
