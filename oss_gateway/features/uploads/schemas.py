"""Pydantic schemas for the chunked-upload API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChunkUploadInit(BaseModel):
    """Request to open or resume a chunked-upload session."""

    file_name: str = Field(..., min_length=1, max_length=255, examples=["report.pdf"])
    file_md5: str = Field(..., min_length=1, max_length=128, description="Content digest")
    total_size: int = Field(..., description="Size of the whole file in bytes")
    chunk_size: int = Field(..., description="Size of every chunk but the last, >= 5 MiB")
    upload_session_id: str = Field(..., min_length=1, max_length=128)
    bucket_name: str | None = Field(None, description="Overrides the default bucket")


class ChunkUploadComplete(BaseModel):
    """Request to merge the uploaded chunks of a session."""

    file_name: str = Field(..., min_length=1, max_length=255)
    file_md5: str = Field(..., min_length=1, max_length=128)
    upload_session_id: str = Field(..., min_length=1, max_length=128)
    total_chunks: int = Field(..., description="Number of chunks the client uploaded")
    bucket_name: str | None = Field(None, description="Overrides the default bucket")


class ChunkUploadStatusResponse(BaseModel):
    """Progress of an upload session."""

    file_name: str | None = None
    file_md5: str
    upload_session_id: str | None = None
    total_size: int | None = None
    chunk_size: int | None = None
    total_chunks: int
    uploaded_chunks: list[int]
    is_completed: bool

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "file_name": "report.pdf",
                    "file_md5": "9e107d9d372bb6826bd81d3542a419d6",
                    "upload_session_id": "a1b2c3",
                    "total_size": 12000000,
                    "chunk_size": 5242880,
                    "total_chunks": 3,
                    "uploaded_chunks": [0, 2],
                    "is_completed": False,
                }
            ]
        }
    }


class ChunkUploadResponse(BaseModel):
    """Receipt for one stored chunk."""

    upload_session_id: str
    file_md5: str
    chunk_index: int
    key: str
    size_bytes: int


class ChunkUploadCompleteResponse(BaseModel):
    """The merged object."""

    bucket: str
    key: str = Field(..., examples=["2025/01/31/550e8400e29b41d4a716446655440000.pdf"])
    url: str
    size_bytes: int
    total_chunks: int
    cleanup_failures: list[str] = Field(
        default_factory=list,
        description="Temporary objects that could not be deleted",
    )


class ChunkUploadCancelResponse(BaseModel):
    prefix: str
    deleted_count: int
    failures: list[str] = Field(default_factory=list)
