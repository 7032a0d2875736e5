"""Storage management API endpoints."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from oss_gateway.core.schemas.common import MessageResponse

from .dependencies import Storage, StorageGateway
from .schemas import (
    BucketCreate,
    BucketListResponse,
    BucketPolicyResponse,
    BucketPolicyUpdate,
    BucketResponse,
    ChunkCountResponse,
    CustomBucketCreate,
    ObjectListResponse,
    ObjectUploadResponse,
)
from .service import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])

BucketQuery = Annotated[
    str | None, Query(description="Bucket name (uses default if not specified)")
]


def _attachment(data: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(data),
        media_type=DEFAULT_CONTENT_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}",
            "X-Original-File-Name": quote(filename),
        },
    )


# ============================================================================
# Bucket Management Endpoints
# ============================================================================


@router.post(
    "/buckets",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a storage bucket",
    description="Creates the bucket and applies the read-only anonymous policy.",
)
async def create_bucket(request: BucketCreate, gateway: StorageGateway) -> MessageResponse:
    await gateway.create_bucket(request.name)
    return MessageResponse(message=f"Bucket '{request.name}' created")


@router.post(
    "/buckets/custom",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bucket with a custom policy",
)
async def create_custom_bucket(
    request: CustomBucketCreate,
    gateway: StorageGateway,
) -> MessageResponse:
    await gateway.create_custom_bucket(request.name, request.actions)
    return MessageResponse(message=f"Bucket '{request.name}' created")


@router.delete(
    "/buckets/{bucket_name}",
    response_model=MessageResponse,
    summary="Delete a storage bucket",
)
async def delete_bucket(bucket_name: str, gateway: StorageGateway) -> MessageResponse:
    await gateway.delete_bucket(bucket_name)
    return MessageResponse(message=f"Bucket '{bucket_name}' deleted")


@router.get("/buckets", response_model=BucketListResponse, summary="List all buckets")
async def list_buckets(gateway: StorageGateway) -> BucketListResponse:
    buckets = await gateway.list_buckets()
    return BucketListResponse(
        buckets=[BucketResponse(name=b.name, creation_date=b.creation_date) for b in buckets],
        total=len(buckets),
    )


@router.put(
    "/buckets/{bucket_name}/policy",
    response_model=MessageResponse,
    summary="Replace a bucket policy",
)
async def set_bucket_policy(
    bucket_name: str,
    request: BucketPolicyUpdate,
    gateway: StorageGateway,
) -> MessageResponse:
    await gateway.set_bucket_policy(bucket_name, request.policy)
    return MessageResponse(message=f"Policy of bucket '{bucket_name}' updated")


@router.get(
    "/buckets/{bucket_name}/policy",
    response_model=BucketPolicyResponse,
    summary="Get a bucket policy",
)
async def get_bucket_policy(bucket_name: str, gateway: StorageGateway) -> BucketPolicyResponse:
    policy = await gateway.get_bucket_policy(bucket_name)
    return BucketPolicyResponse(bucket=bucket_name, policy=policy)


# ============================================================================
# Object Endpoints
# ============================================================================


@router.post(
    "/objects",
    response_model=ObjectUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    description="Stores the file under a generated YYYY/MM/DD/<id><ext> key.",
)
async def upload_file(
    file: Annotated[UploadFile, File(...)],
    gateway: StorageGateway,
    bucket_name: Annotated[str | None, Form()] = None,
) -> ObjectUploadResponse:
    data = await file.read()
    content_type = file.content_type or DEFAULT_CONTENT_TYPE
    result, url = await gateway.upload_file(
        file_name=file.filename,
        data=data,
        content_type=content_type,
        bucket=bucket_name,
    )
    return ObjectUploadResponse(
        bucket=result.bucket,
        key=result.key,
        url=url,
        size_bytes=result.size_bytes,
        etag=result.etag,
        content_type=content_type,
    )


@router.get("/objects/download", summary="Download a file")
async def download_file(
    gateway: StorageGateway,
    object_name: Annotated[str, Query(min_length=1)],
    bucket_name: BucketQuery = None,
) -> StreamingResponse:
    data = await gateway.download_file(object_name, bucket_name)
    return _attachment(data, object_name.rsplit("/", 1)[-1])


@router.delete("/objects", response_model=MessageResponse, summary="Remove a file")
async def remove_file(
    gateway: StorageGateway,
    object_name: Annotated[str, Query(min_length=1)],
    bucket_name: BucketQuery = None,
) -> MessageResponse:
    await gateway.remove_file(object_name, bucket_name)
    return MessageResponse(message=f"Object '{object_name}' removed")


@router.get("/objects", response_model=ObjectListResponse, summary="List files")
async def list_files(
    gateway: StorageGateway,
    storage: Storage,
    bucket_name: BucketQuery = None,
    prefix: Annotated[str | None, Query()] = None,
    recursive: Annotated[bool, Query()] = False,
    size: Annotated[int | None, Query(ge=1, description="Maximum number of keys")] = None,
) -> ObjectListResponse:
    keys = await gateway.list_files(bucket_name, prefix, recursive=recursive, limit=size)
    return ObjectListResponse(
        bucket=storage.resolve_bucket(bucket_name),
        prefix=prefix or "",
        keys=keys,
    )


@router.get(
    "/objects/chunk-count",
    response_model=ChunkCountResponse,
    summary="Count the pieces of a ranged download",
)
async def get_chunk_count(
    gateway: StorageGateway,
    storage: Storage,
    object_name: Annotated[str, Query(min_length=1)],
    length: Annotated[int, Query(ge=1)],
    bucket_name: BucketQuery = None,
) -> ChunkCountResponse:
    count = await gateway.chunk_count(object_name, length, bucket_name)
    return ChunkCountResponse(
        bucket=storage.resolve_bucket(bucket_name),
        object_name=object_name,
        length=length,
        chunk_count=count,
    )


@router.get("/objects/range", summary="Download a byte range of a file")
async def download_range(
    gateway: StorageGateway,
    object_name: Annotated[str, Query(min_length=1)],
    offset: Annotated[int, Query(ge=0)],
    length: Annotated[int | None, Query(ge=1)] = None,
    bucket_name: BucketQuery = None,
) -> StreamingResponse:
    data, filename = await gateway.download_range(object_name, offset, length, bucket_name)
    return _attachment(data, filename)
