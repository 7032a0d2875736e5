"""In-memory registry of named bucket policy templates.

The registry is owned by the application (created in the lifespan and kept
on ``app.state``) and lives as long as the process; custom templates are not
persisted. Every read-modify-write runs under one re-entrant lock.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from oss_gateway.core.exceptions import (
    ConflictException,
    InvalidArgumentException,
    NotFoundException,
)

from . import metrics
from .templates import BUILTIN_DESCRIPTIONS, BUILTIN_POLICIES, PolicyTemplate, PolicyType

if TYPE_CHECKING:
    from oss_gateway.infra.storage.service import StorageService

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATE_NAMES = frozenset(str(policy_type) for policy_type in BUILTIN_POLICIES)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_policy_type(value: str | PolicyType) -> PolicyType:
    try:
        return PolicyType(value)
    except ValueError:
        raise InvalidArgumentException(
            f"Unknown policy type '{value}'",
            type="invalid-policy-type",
            extra={"allowed": [str(t) for t in PolicyType]},
        ) from None


def validate_policy_json(policy: str | None) -> str:
    """Return ``policy`` if it is a JSON object, else raise InvalidArgument."""
    if policy is None or not policy.strip():
        raise InvalidArgumentException(
            "A custom policy template needs a policy body", type="invalid-policy"
        )
    try:
        document = json.loads(policy)
    except json.JSONDecodeError as e:
        raise InvalidArgumentException(
            f"Policy is not valid JSON: {e.msg}", type="invalid-policy"
        ) from e
    if not isinstance(document, dict):
        raise InvalidArgumentException("Policy must be a JSON object", type="invalid-policy")
    return policy


class PolicyTemplateRegistry:
    """Thread-safe store of policy templates, seeded with the built-ins.

    Example:
        registry = PolicyTemplateRegistry()
        registry.create("archive", "Archive readers", "custom", policy=archive_json)
        await registry.apply("reports", "archive", storage)
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._templates: dict[str, PolicyTemplate] = {}
        self._seed_builtins()

    def _seed_builtins(self) -> None:
        now = self._clock()
        for policy_type, body in BUILTIN_POLICIES.items():
            self._templates[str(policy_type)] = PolicyTemplate(
                template_name=str(policy_type),
                description=BUILTIN_DESCRIPTIONS[policy_type],
                policy_type=policy_type,
                policy=body,
                created_at=now,
                updated_at=now,
            )

    @staticmethod
    def is_builtin(name: str) -> bool:
        return name in BUILTIN_TEMPLATE_NAMES

    def create(
        self,
        template_name: str,
        description: str,
        policy_type: str | PolicyType,
        policy: str | None = None,
    ) -> PolicyTemplate:
        """Register a new template.

        Non-custom types always take the built-in body; ``policy`` is only
        read for ``custom`` templates.
        """
        parsed_type = _parse_policy_type(policy_type)
        if parsed_type is PolicyType.CUSTOM:
            body = validate_policy_json(policy)
        else:
            body = BUILTIN_POLICIES[parsed_type]

        with self._lock:
            if template_name in self._templates:
                raise ConflictException(
                    f"Policy template '{template_name}' already exists",
                    type="policy-template-exists",
                    extra={"template_name": template_name},
                )
            now = self._clock()
            template = PolicyTemplate(
                template_name=template_name,
                description=description,
                policy_type=parsed_type,
                policy=body,
                created_at=now,
                updated_at=now,
            )
            self._templates[template_name] = template

        metrics.policy_template_operations_total.labels(operation="create").inc()
        logger.info(
            "Policy template created",
            extra={"template_name": template_name, "policy_type": str(parsed_type)},
        )
        return template

    def get(self, template_name: str) -> PolicyTemplate:
        with self._lock:
            template = self._templates.get(template_name)
        if template is None:
            raise NotFoundException(
                f"Policy template '{template_name}' not found",
                type="policy-template-not-found",
                extra={"template_name": template_name},
            )
        return template

    def list(self) -> list[PolicyTemplate]:
        with self._lock:
            templates = list(self._templates.values())
        return sorted(templates, key=lambda t: t.template_name)

    def update(
        self,
        template_name: str,
        description: str,
        policy_type: str | PolicyType,
        policy: str | None = None,
    ) -> PolicyTemplate:
        """Replace a template, keeping its creation time.

        A built-in keeps its policy type. For non-custom types a supplied
        body replaces the stored one (it must be a JSON object); without one
        the type's built-in body is used.
        """
        parsed_type = _parse_policy_type(policy_type)
        if parsed_type is PolicyType.CUSTOM or (policy is not None and policy.strip()):
            body = validate_policy_json(policy)
        else:
            body = BUILTIN_POLICIES[parsed_type]

        with self._lock:
            existing = self.get(template_name)
            if self.is_builtin(template_name) and existing.policy_type is not parsed_type:
                raise InvalidArgumentException(
                    f"The policy type of built-in template '{template_name}' cannot change",
                    type="builtin-policy-template",
                    extra={"template_name": template_name},
                )
            template = replace(
                existing,
                description=description,
                policy_type=parsed_type,
                policy=body,
                updated_at=self._clock(),
            )
            self._templates[template_name] = template

        metrics.policy_template_operations_total.labels(operation="update").inc()
        logger.info("Policy template updated", extra={"template_name": template_name})
        return template

    def delete(self, template_name: str) -> None:
        with self._lock:
            self.get(template_name)
            if self.is_builtin(template_name):
                raise InvalidArgumentException(
                    f"Built-in template '{template_name}' cannot be deleted",
                    type="builtin-policy-template",
                    extra={"template_name": template_name},
                )
            del self._templates[template_name]

        metrics.policy_template_operations_total.labels(operation="delete").inc()
        logger.info("Policy template deleted", extra={"template_name": template_name})

    async def apply(self, bucket: str, template_name: str, storage: StorageService) -> str:
        """Render a template for ``bucket`` and install it as the bucket policy.

        Returns:
            The policy JSON that was applied

        Raises:
            NotFoundException: If the template or the bucket does not exist
        """
        policy = self.get(template_name).render(bucket)

        if not await storage.bucket_exists(bucket):
            raise NotFoundException(
                f"Bucket '{bucket}' not found",
                type="bucket-not-found",
                extra={"bucket": bucket},
            )
        await storage.set_bucket_policy(bucket, policy)

        metrics.policy_template_operations_total.labels(operation="apply").inc()
        logger.info(
            "Policy template applied",
            extra={"template_name": template_name, "bucket": bucket},
        )
        return policy
