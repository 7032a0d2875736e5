"""Value objects returned by the chunked-upload components."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SessionStatus:
    """Progress of an upload session, reconstructed from a prefix listing."""

    file_digest: str
    total_chunks: int
    uploaded_chunks: list[int]
    is_completed: bool
    upload_session_id: str | None = None
    file_name: str | None = None
    total_size: int | None = None
    chunk_size: int | None = None


@dataclass(frozen=True)
class ChunkReceipt:
    upload_session_id: str
    file_digest: str
    chunk_index: int
    key: str
    size_bytes: int


@dataclass(frozen=True)
class CompletedUpload:
    """A merged object and the outcome of the staging cleanup."""

    bucket: str
    key: str
    url: str
    size_bytes: int
    total_chunks: int
    cleanup_failures: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CancelResult:
    prefix: str
    deleted_count: int
    failures: list[str] = field(default_factory=list)
