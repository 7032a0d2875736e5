"""Chunked-upload session protocol.

A client opens (or resumes) a session with ``init_session``, sends parts
with ``put_chunk`` in any order and as many times as it needs, and finally
calls ``complete``. Every input check runs before the object store is
touched, so rejected calls have no side effects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from oss_gateway.core.exceptions import InvalidArgumentException
from oss_gateway.core.services.base import BaseService
from oss_gateway.core.settings import get_upload_settings

from . import metrics
from .merge import DEFAULT_CONTENT_TYPE, MergeEngine
from .naming import (
    MIN_PART_SIZE,
    chunk_key,
    count_chunks,
    require_extension,
    require_identifier,
)
from .results import CancelResult, ChunkReceipt, CompletedUpload, SessionStatus
from .tracker import UploadSessionTracker

if TYPE_CHECKING:
    from oss_gateway.core.settings.uploads import UploadSettings
    from oss_gateway.infra.storage.service import StorageService


class ChunkUploadOrchestrator(BaseService):
    """Entry point for the chunked-upload protocol.

    Example:
        orchestrator = ChunkUploadOrchestrator(storage)
        status = await orchestrator.init_session("report.pdf", md5, 12_000_000, 5_242_880, sid)
        for index in range(status.total_chunks):
            if index not in status.uploaded_chunks:
                await orchestrator.put_chunk(sid, md5, index, status.total_chunks, parts[index])
        done = await orchestrator.complete("report.pdf", md5, sid, status.total_chunks)
    """

    def __init__(
        self,
        storage: StorageService,
        settings: UploadSettings | None = None,
        tracker: UploadSessionTracker | None = None,
        merge_engine: MergeEngine | None = None,
    ) -> None:
        super().__init__()
        self._storage = storage
        self._settings = settings or get_upload_settings()
        self.tracker = tracker or UploadSessionTracker(storage)
        self.merge_engine = merge_engine or MergeEngine(storage, self.tracker, self._settings)

    async def init_session(
        self,
        file_name: str,
        file_digest: str,
        total_size: int,
        chunk_size: int,
        upload_session_id: str,
        bucket: str | None = None,
    ) -> SessionStatus:
        """Open or resume a session and report the chunks already stored.

        Read-only; safe to call again after a client reconnects.
        """
        require_extension(file_name)
        upload_session_id = require_identifier(upload_session_id, "upload_session_id")
        file_digest = require_identifier(file_digest, "file_md5")
        if total_size <= 0:
            raise InvalidArgumentException(
                "total_size must be positive", extra={"total_size": total_size}
            )
        if chunk_size < MIN_PART_SIZE:
            raise InvalidArgumentException(
                f"chunk_size must be at least {MIN_PART_SIZE} bytes",
                type="chunk-too-small",
                extra={"chunk_size": chunk_size, "min_chunk_size": MIN_PART_SIZE},
            )
        if chunk_size > self._settings.max_chunk_size_bytes:
            raise InvalidArgumentException(
                f"chunk_size must not exceed {self._settings.max_chunk_size_bytes} bytes",
                extra={"chunk_size": chunk_size},
            )

        total_chunks = count_chunks(total_size, chunk_size)
        uploaded = await self.tracker.list_uploaded_chunks(upload_session_id, file_digest, bucket)

        self.logger.info(
            "Upload session initialized",
            extra={
                "upload_session_id": upload_session_id,
                "file_md5": file_digest,
                "total_chunks": total_chunks,
                "uploaded": len(uploaded),
            },
        )
        return SessionStatus(
            file_digest=file_digest,
            upload_session_id=upload_session_id,
            file_name=file_name,
            total_size=total_size,
            chunk_size=chunk_size,
            total_chunks=total_chunks,
            uploaded_chunks=uploaded,
            is_completed=self.tracker.is_complete(uploaded, total_chunks),
        )

    async def put_chunk(
        self,
        upload_session_id: str,
        file_digest: str,
        chunk_index: int,
        total_chunks: int,
        data: bytes,
        bucket: str | None = None,
    ) -> ChunkReceipt:
        """Store one chunk at its deterministic key, replacing any earlier copy."""
        try:
            upload_session_id = require_identifier(upload_session_id, "upload_session_id")
            file_digest = require_identifier(file_digest, "file_md5")
            if not data:
                raise InvalidArgumentException("Chunk payload is empty", type="empty-chunk")
            if len(data) > self._settings.max_chunk_size_bytes:
                raise InvalidArgumentException(
                    f"Chunk payload exceeds {self._settings.max_chunk_size_bytes} bytes",
                    extra={"size_bytes": len(data)},
                )
            if total_chunks < 1:
                raise InvalidArgumentException(
                    "total_chunks must be at least 1", extra={"total_chunks": total_chunks}
                )
            if not 0 <= chunk_index < total_chunks:
                raise InvalidArgumentException(
                    f"chunk_index {chunk_index} is outside [0, {total_chunks})",
                    extra={"chunk_index": chunk_index, "total_chunks": total_chunks},
                )
        except InvalidArgumentException:
            metrics.chunk_uploads_total.labels(outcome="rejected").inc()
            raise

        key = chunk_key(upload_session_id, file_digest, chunk_index)
        try:
            result = await self._storage.upload_object(
                key, data, bucket, content_type=DEFAULT_CONTENT_TYPE
            )
        except Exception:
            metrics.chunk_uploads_total.labels(outcome="failed").inc()
            raise

        metrics.chunk_uploads_total.labels(outcome="stored").inc()
        metrics.chunk_upload_bytes_total.inc(result.size_bytes)
        self.logger.debug(
            "Chunk stored",
            extra={
                "upload_session_id": upload_session_id,
                "chunk_index": chunk_index,
                "size_bytes": result.size_bytes,
            },
        )
        return ChunkReceipt(
            upload_session_id=upload_session_id,
            file_digest=file_digest,
            chunk_index=chunk_index,
            key=key,
            size_bytes=result.size_bytes,
        )

    async def complete(
        self,
        file_name: str,
        file_digest: str,
        upload_session_id: str,
        total_chunks: int,
        bucket: str | None = None,
    ) -> CompletedUpload:
        return await self.merge_engine.complete(
            file_name, file_digest, upload_session_id, total_chunks, bucket
        )

    async def status(
        self,
        file_digest: str,
        bucket: str | None = None,
        upload_session_id: str | None = None,
    ) -> SessionStatus:
        """Progress of a session, or of every session staging ``file_digest``."""
        file_digest = require_identifier(file_digest, "file_md5")
        if upload_session_id is not None and upload_session_id.strip():
            upload_session_id = require_identifier(upload_session_id, "upload_session_id")
            return await self.tracker.session_status(upload_session_id, file_digest, bucket)
        return await self.tracker.digest_status(file_digest, bucket)

    async def cancel(
        self,
        file_digest: str,
        bucket: str | None = None,
        upload_session_id: str | None = None,
    ) -> CancelResult:
        return await self.merge_engine.cancel(file_digest, bucket, upload_session_id)
