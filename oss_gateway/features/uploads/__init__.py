"""Resumable chunked uploads composed server-side into a single object."""

from .merge import MergeEngine
from .naming import CHUNK_SUFFIX, MIN_PART_SIZE, RESERVED_PREFIX
from .orchestrator import ChunkUploadOrchestrator
from .results import CancelResult, ChunkReceipt, CompletedUpload, SessionStatus
from .router import router
from .tracker import UploadSessionTracker

__all__ = [
    "CHUNK_SUFFIX",
    "MIN_PART_SIZE",
    "RESERVED_PREFIX",
    "CancelResult",
    "ChunkReceipt",
    "ChunkUploadOrchestrator",
    "CompletedUpload",
    "MergeEngine",
    "SessionStatus",
    "UploadSessionTracker",
    "router",
]
