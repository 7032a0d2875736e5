"""Chunked-upload API endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from .dependencies import Orchestrator
from .results import SessionStatus
from .schemas import (
    ChunkUploadCancelResponse,
    ChunkUploadComplete,
    ChunkUploadCompleteResponse,
    ChunkUploadInit,
    ChunkUploadResponse,
    ChunkUploadStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads/chunked", tags=["chunked-uploads"])


def _status_response(session: SessionStatus) -> ChunkUploadStatusResponse:
    return ChunkUploadStatusResponse(
        file_name=session.file_name,
        file_md5=session.file_digest,
        upload_session_id=session.upload_session_id,
        total_size=session.total_size,
        chunk_size=session.chunk_size,
        total_chunks=session.total_chunks,
        uploaded_chunks=session.uploaded_chunks,
        is_completed=session.is_completed,
    )


@router.post(
    "/init",
    response_model=ChunkUploadStatusResponse,
    summary="Open or resume a chunked upload",
    description="Computes the chunk count and lists the chunks already stored for the session.",
)
async def init_chunk_upload(
    request: ChunkUploadInit,
    orchestrator: Orchestrator,
) -> ChunkUploadStatusResponse:
    session = await orchestrator.init_session(
        file_name=request.file_name,
        file_digest=request.file_md5,
        total_size=request.total_size,
        chunk_size=request.chunk_size,
        upload_session_id=request.upload_session_id,
        bucket=request.bucket_name,
    )
    return _status_response(session)


@router.post(
    "/chunk",
    response_model=ChunkUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload one chunk",
    description="Stores a chunk at its deterministic key. Retrying an index overwrites it.",
)
async def upload_chunk(
    orchestrator: Orchestrator,
    file: Annotated[UploadFile, File(...)],
    file_md5: Annotated[str, Form()],
    upload_session_id: Annotated[str, Form()],
    chunk_index: Annotated[int, Form()],
    total_chunks: Annotated[int, Form()],
    file_name: Annotated[str | None, Form()] = None,
    bucket_name: Annotated[str | None, Form()] = None,
) -> ChunkUploadResponse:
    data = await file.read()
    receipt = await orchestrator.put_chunk(
        upload_session_id=upload_session_id,
        file_digest=file_md5,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
        data=data,
        bucket=bucket_name,
    )
    logger.debug(
        "Chunk received",
        extra={"file_name": file_name, "chunk_index": chunk_index, "size_bytes": len(data)},
    )
    return ChunkUploadResponse(
        upload_session_id=receipt.upload_session_id,
        file_md5=receipt.file_digest,
        chunk_index=receipt.chunk_index,
        key=receipt.key,
        size_bytes=receipt.size_bytes,
    )


@router.post(
    "/complete",
    response_model=ChunkUploadCompleteResponse,
    summary="Merge the chunks of a session",
    description=(
        "Composes chunks 0..total_chunks-1 into a date-keyed object and deletes "
        "the session's temporary objects."
    ),
)
async def complete_chunk_upload(
    request: ChunkUploadComplete,
    orchestrator: Orchestrator,
) -> ChunkUploadCompleteResponse:
    completed = await orchestrator.complete(
        file_name=request.file_name,
        file_digest=request.file_md5,
        upload_session_id=request.upload_session_id,
        total_chunks=request.total_chunks,
        bucket=request.bucket_name,
    )
    return ChunkUploadCompleteResponse(
        bucket=completed.bucket,
        key=completed.key,
        url=completed.url,
        size_bytes=completed.size_bytes,
        total_chunks=completed.total_chunks,
        cleanup_failures=completed.cleanup_failures,
    )


@router.get(
    "/status",
    response_model=ChunkUploadStatusResponse,
    summary="Get chunked upload progress",
)
async def get_chunk_upload_status(
    orchestrator: Orchestrator,
    file_md5: Annotated[str, Query(min_length=1)],
    bucket_name: Annotated[str | None, Query()] = None,
    upload_session_id: Annotated[str | None, Query()] = None,
) -> ChunkUploadStatusResponse:
    """Without a session id, reports the chunks staged for the digest by any session."""
    session = await orchestrator.status(file_md5, bucket_name, upload_session_id)
    return _status_response(session)


@router.delete(
    "",
    response_model=ChunkUploadCancelResponse,
    summary="Cancel a chunked upload",
    description="Deletes the temporary objects of the session. Cancelling twice is a no-op.",
)
async def cancel_chunk_upload(
    orchestrator: Orchestrator,
    file_md5: Annotated[str, Query(min_length=1)],
    bucket_name: Annotated[str | None, Query()] = None,
    upload_session_id: Annotated[str | None, Query()] = None,
) -> ChunkUploadCancelResponse:
    result = await orchestrator.cancel(file_md5, bucket_name, upload_session_id)
    return ChunkUploadCancelResponse(
        prefix=result.prefix,
        deleted_count=result.deleted_count,
        failures=result.failures,
    )
