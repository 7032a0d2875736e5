"""Pydantic schemas for storage management API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# ============================================================================
# Bucket Schemas
# ============================================================================


class BucketCreate(BaseModel):
    """Request schema for creating a bucket."""

    name: str = Field(
        ...,
        min_length=3,
        max_length=63,
        description="Bucket name (DNS-compliant)",
        examples=["media", "acme-uploads"],
    )


class CustomBucketCreate(BucketCreate):
    """Request schema for creating a bucket with a custom anonymous policy."""

    actions: list[str] = Field(
        ...,
        min_length=1,
        description="S3 actions allowed on every object of the bucket",
        examples=[["s3:GetObject", "s3:PutObject"]],
    )


class BucketResponse(BaseModel):
    name: str = Field(..., description="Bucket name")
    creation_date: datetime | None = Field(None, description="When bucket was created")


class BucketListResponse(BaseModel):
    buckets: list[BucketResponse]
    total: int


class BucketPolicyUpdate(BaseModel):
    policy: str = Field(..., min_length=2, description="Bucket policy JSON document")


class BucketPolicyResponse(BaseModel):
    bucket: str
    policy: str | None = Field(None, description="Policy JSON, null when the bucket has none")


# ============================================================================
# Object Schemas
# ============================================================================


class ObjectUploadResponse(BaseModel):
    """Response schema for a single-shot upload."""

    bucket: str
    key: str = Field(..., examples=["2025/01/31/550e8400e29b41d4a716446655440000.png"])
    url: str
    size_bytes: int
    etag: str | None = None
    content_type: str


class ObjectListResponse(BaseModel):
    bucket: str
    prefix: str
    keys: list[str]


class ChunkCountResponse(BaseModel):
    bucket: str
    object_name: str
    length: int
    chunk_count: int
