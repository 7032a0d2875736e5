"""Prometheus metrics for chunked uploads."""

from __future__ import annotations

from prometheus_client import Counter

from oss_gateway.infra.metrics.prometheus import REGISTRY

chunk_uploads_total = Counter(
    "chunk_uploads_total",
    "Chunk upload attempts by outcome",
    ["outcome"],
    registry=REGISTRY,
)

chunk_upload_bytes_total = Counter(
    "chunk_upload_bytes_total",
    "Bytes written to chunk staging objects",
    registry=REGISTRY,
)

chunk_sessions_completed_total = Counter(
    "chunk_sessions_completed_total",
    "Upload session completions by outcome",
    ["outcome"],
    registry=REGISTRY,
)

chunk_cleanup_failures_total = Counter(
    "chunk_cleanup_failures_total",
    "Temporary objects that could not be deleted after merge or cancel",
    registry=REGISTRY,
)
