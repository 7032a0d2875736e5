"""Prometheus metrics for policy templates."""

from __future__ import annotations

from prometheus_client import Counter

from oss_gateway.infra.metrics.prometheus import REGISTRY

policy_template_operations_total = Counter(
    "policy_template_operations_total",
    "Policy template registry operations",
    ["operation"],
    registry=REGISTRY,
)
