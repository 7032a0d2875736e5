"""Merge a completed upload session into its final object.

Completion is a non-transactional sequence: validate, claim, compose, then
delete the staging chunks best-effort. The completion marker is deleted last
and only once every chunk is gone, so a late second completion can never
find a full set of chunks without also finding the marker. A crash between
compose and cleanup leaves orphaned staging objects behind; the final object
existing is what signals success to the caller.
"""

from __future__ import annotations

import mimetypes
from typing import TYPE_CHECKING

from oss_gateway.core.exceptions import (
    ConflictException,
    InvalidArgumentException,
    NotFoundException,
)
from oss_gateway.core.services.base import BaseService
from oss_gateway.core.settings import get_upload_settings
from oss_gateway.infra.storage.backends.protocol import MAX_COMPOSE_SOURCES
from oss_gateway.infra.storage.exceptions import StorageError
from oss_gateway.infra.storage.path import build_object_url

from . import metrics
from .naming import (
    MIN_PART_SIZE,
    RESERVED_PREFIX,
    chunk_key,
    completion_marker_key,
    digest_of_key,
    digest_prefix,
    final_object_key,
    require_identifier,
    session_prefix,
)
from .results import CancelResult, CompletedUpload

if TYPE_CHECKING:
    from oss_gateway.core.settings.uploads import UploadSettings
    from oss_gateway.infra.storage.service import StorageService

    from .tracker import UploadSessionTracker

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class MergeEngine(BaseService):
    """Composes staged chunks into a final object and cleans up staging state."""

    def __init__(
        self,
        storage: StorageService,
        tracker: UploadSessionTracker,
        settings: UploadSettings | None = None,
    ) -> None:
        super().__init__()
        self._storage = storage
        self._tracker = tracker
        self._settings = settings or get_upload_settings()

    async def complete(
        self,
        file_name: str,
        file_digest: str,
        upload_session_id: str,
        total_chunks: int,
        bucket: str | None = None,
    ) -> CompletedUpload:
        """Compose chunks ``0..total_chunks-1`` into a new date-keyed object.

        Raises:
            InvalidArgumentException: On bad input, missing chunks or an
                undersized first chunk
            NotFoundException: If chunk 0 disappeared after listing
            ConflictException: If another completion holds the session claim
                or finished the session first
            StorageError: If the compose call fails
        """
        final_key = final_object_key(file_name)
        upload_session_id = require_identifier(upload_session_id, "upload_session_id")
        file_digest = require_identifier(file_digest, "file_md5")
        if total_chunks < 1:
            raise InvalidArgumentException(
                "total_chunks must be at least 1", extra={"total_chunks": total_chunks}
            )
        if total_chunks > MAX_COMPOSE_SOURCES:
            raise InvalidArgumentException(
                f"total_chunks must not exceed {MAX_COMPOSE_SOURCES}",
                extra={"total_chunks": total_chunks},
            )

        resolved_bucket = self._storage.resolve_bucket(bucket)
        log_extra = {
            "upload_session_id": upload_session_id,
            "file_md5": file_digest,
            "bucket": resolved_bucket,
            "total_chunks": total_chunks,
        }

        uploaded = await self._tracker.list_uploaded_chunks(
            upload_session_id, file_digest, resolved_bucket
        )
        if not self._tracker.is_complete(uploaded, total_chunks):
            missing = self._tracker.missing_chunks(uploaded, total_chunks)
            raise InvalidArgumentException(
                f"Upload is incomplete: {len(missing)} of {total_chunks} chunks missing",
                type="chunks-missing",
                extra={"missing_chunks": missing},
            )

        first_chunk = await self._storage.get_object_metadata(
            chunk_key(upload_session_id, file_digest, 0), resolved_bucket
        )
        if first_chunk is None:
            raise NotFoundException(
                "First chunk of the upload session was not found",
                type="chunk-not-found",
                extra={"chunk_index": 0},
            )
        if first_chunk.size_bytes < MIN_PART_SIZE:
            raise InvalidArgumentException(
                f"Chunk 0 is {first_chunk.size_bytes} bytes; "
                f"compose needs parts of at least {MIN_PART_SIZE} bytes",
                type="chunk-too-small",
                extra={"chunk_index": 0, "size_bytes": first_chunk.size_bytes},
            )

        claimed = await self._claim(upload_session_id, resolved_bucket)
        if claimed:
            await self._verify_after_claim(
                upload_session_id, file_digest, total_chunks, resolved_bucket
            )

        source_keys = [
            chunk_key(upload_session_id, file_digest, index) for index in range(total_chunks)
        ]
        content_type = mimetypes.guess_type(file_name)[0] or DEFAULT_CONTENT_TYPE

        self.logger.info("Composing upload session", extra={**log_extra, "key": final_key})
        try:
            size = await self._storage.compose_object(
                final_key, source_keys, resolved_bucket, content_type=content_type
            )
        except Exception:
            metrics.chunk_sessions_completed_total.labels(outcome="failed").inc()
            self.logger.exception("Compose failed", extra={**log_extra, "key": final_key})
            if claimed:
                await self._release_claim(upload_session_id, resolved_bucket)
            raise

        cleanup = await self._cleanup_session(upload_session_id, resolved_bucket, claimed)
        metrics.chunk_sessions_completed_total.labels(outcome="completed").inc()
        self.logger.info(
            "Upload session completed",
            extra={
                **log_extra,
                "key": final_key,
                "size_bytes": size,
                "cleanup_deleted": cleanup.deleted_count,
                "cleanup_failures": len(cleanup.failures),
            },
        )

        return CompletedUpload(
            bucket=resolved_bucket,
            key=final_key,
            url=self.public_url(resolved_bucket, final_key),
            size_bytes=size,
            total_chunks=total_chunks,
            cleanup_failures=cleanup.failures,
        )

    async def cancel(
        self,
        file_digest: str,
        bucket: str | None = None,
        upload_session_id: str | None = None,
    ) -> CancelResult:
        """Delete the staging objects of a session.

        Without a session id the sweep covers everything under the digest
        prefix and the digest's chunks in every session. Cancelling an
        empty prefix is a no-op.
        """
        file_digest = require_identifier(file_digest, "file_md5")
        if upload_session_id is not None and upload_session_id.strip():
            prefix = session_prefix(require_identifier(upload_session_id, "upload_session_id"))
            result = await self.purge_prefix(prefix, bucket)
        else:
            prefix = digest_prefix(file_digest)
            keys = [
                obj.key
                async for obj in self._storage.stream_objects(f"{RESERVED_PREFIX}/", bucket)
                if obj.key.startswith(prefix) or digest_of_key(obj.key) == file_digest
            ]
            result = await self._delete_keys(keys, prefix, bucket)

        self.logger.info(
            "Upload cancelled",
            extra={
                "prefix": prefix,
                "file_md5": file_digest,
                "deleted_count": result.deleted_count,
                "failures": len(result.failures),
            },
        )
        return result

    async def _cleanup_session(
        self, upload_session_id: str, bucket: str, claimed: bool
    ) -> CancelResult:
        """Delete a composed session's staging objects without ever raising.

        A claimed marker is skipped while the chunks are deleted and removed
        only when all of them are gone. If the listing itself fails, the
        whole prefix is reported as a cleanup failure and the marker stays.
        """
        prefix = session_prefix(upload_session_id)
        marker = completion_marker_key(upload_session_id)
        try:
            keys = [
                obj.key
                async for obj in self._storage.stream_objects(prefix, bucket)
                if not (claimed and obj.key == marker)
            ]
        except StorageError as e:
            metrics.chunk_cleanup_failures_total.inc()
            self.logger.warning(
                "Failed to list staging objects after compose",
                extra={"prefix": prefix, "bucket": bucket, "error": str(e)},
            )
            return CancelResult(prefix=prefix, deleted_count=0, failures=[prefix])

        result = await self._delete_keys(keys, prefix, bucket)
        if not claimed or result.failures:
            return result

        released = await self._delete_keys([marker], prefix, bucket)
        return CancelResult(
            prefix=prefix,
            deleted_count=result.deleted_count + released.deleted_count,
            failures=released.failures,
        )

    async def purge_prefix(self, prefix: str, bucket: str | None = None) -> CancelResult:
        """Best-effort delete of every object under ``prefix``.

        Individual delete failures are logged and collected, never raised.
        """
        keys = [obj.key async for obj in self._storage.stream_objects(prefix, bucket)]
        return await self._delete_keys(keys, prefix, bucket)

    async def _delete_keys(
        self, keys: list[str], prefix: str, bucket: str | None
    ) -> CancelResult:
        deleted = 0
        failures: list[str] = []

        for key in keys:
            try:
                await self._storage.delete_object(key, bucket)
            except StorageError as e:
                failures.append(key)
                metrics.chunk_cleanup_failures_total.inc()
                self.logger.warning(
                    "Failed to delete temporary object",
                    extra={"key": key, "prefix": prefix, "error": str(e)},
                )
            else:
                deleted += 1

        return CancelResult(prefix=prefix, deleted_count=deleted, failures=failures)

    def public_url(self, bucket: str, key: str) -> str:
        return build_object_url(self._settings.public_base_url, bucket, key)

    async def _claim(self, upload_session_id: str, bucket: str) -> bool:
        """Create the session's completion marker; False when claims are disabled."""
        if not self._settings.completion_claim_enabled:
            return False

        marker = completion_marker_key(upload_session_id)
        created = await self._storage.put_object_if_absent(marker, b"", bucket)
        if not created:
            metrics.chunk_sessions_completed_total.labels(outcome="conflict").inc()
            raise ConflictException(
                "Upload session is already being completed",
                type="upload-completing",
                extra={"upload_session_id": upload_session_id},
            )
        return True

    async def _verify_after_claim(
        self, upload_session_id: str, file_digest: str, total_chunks: int, bucket: str
    ) -> None:
        """Re-list after claiming; a completion that just finished leaves no chunks behind."""
        try:
            uploaded = await self._tracker.list_uploaded_chunks(
                upload_session_id, file_digest, bucket
            )
        except StorageError:
            await self._release_claim(upload_session_id, bucket)
            raise
        if self._tracker.is_complete(uploaded, total_chunks):
            return

        await self._release_claim(upload_session_id, bucket)
        metrics.chunk_sessions_completed_total.labels(outcome="conflict").inc()
        raise ConflictException(
            "Upload session was completed or cancelled concurrently",
            type="upload-completed",
            extra={"upload_session_id": upload_session_id},
        )

    async def _release_claim(self, upload_session_id: str, bucket: str) -> None:
        marker = completion_marker_key(upload_session_id)
        try:
            await self._storage.delete_object(marker, bucket)
        except StorageError as e:
            self.logger.warning(
                "Failed to release completion claim",
                extra={"key": marker, "error": str(e)},
            )
