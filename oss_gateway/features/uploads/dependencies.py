"""Dependencies for the chunked-upload endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from oss_gateway.core.settings import get_upload_settings
from oss_gateway.infra.storage.dependencies import Storage

from .orchestrator import ChunkUploadOrchestrator


def get_chunk_upload_orchestrator(storage: Storage) -> ChunkUploadOrchestrator:
    """Build an orchestrator over the ready storage service."""
    return ChunkUploadOrchestrator(storage, settings=get_upload_settings())


Orchestrator = Annotated[ChunkUploadOrchestrator, Depends(get_chunk_upload_orchestrator)]
