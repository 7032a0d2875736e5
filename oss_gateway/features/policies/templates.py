"""Bucket policy documents.

Built-in bodies carry a ``{bucket}`` placeholder that is substituted when a
template is applied to a bucket.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

POLICY_VERSION = "2012-10-17"
BUCKET_PLACEHOLDER = "{bucket}"

_ANONYMOUS = {"AWS": ["*"]}


class PolicyType(StrEnum):
    PUBLIC = "public"
    READONLY = "readonly"
    PRIVATE = "private"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PolicyTemplate:
    """A named bucket policy."""

    template_name: str
    description: str
    policy_type: PolicyType
    policy: str
    created_at: datetime
    updated_at: datetime

    def render(self, bucket: str) -> str:
        """Return the policy JSON with the bucket placeholder filled in."""
        return self.policy.replace(BUCKET_PLACEHOLDER, bucket)


def _allow(actions: list[str], resource: str) -> dict[str, Any]:
    return {
        "Effect": "Allow",
        "Principal": _ANONYMOUS,
        "Action": actions,
        "Resource": [resource],
    }


def _document(statements: list[dict[str, Any]]) -> str:
    return json.dumps({"Version": POLICY_VERSION, "Statement": statements}, indent=2)


PUBLIC_POLICY = _document(
    [
        _allow(
            ["s3:GetBucketLocation", "s3:ListBucket", "s3:ListBucketMultipartUploads"],
            f"arn:aws:s3:::{BUCKET_PLACEHOLDER}",
        ),
        _allow(
            [
                "s3:GetObject",
                "s3:ListMultipartUploadParts",
                "s3:PutObject",
                "s3:AbortMultipartUpload",
                "s3:DeleteObject",
            ],
            f"arn:aws:s3:::{BUCKET_PLACEHOLDER}/*",
        ),
    ]
)

READONLY_POLICY = _document([_allow(["s3:GetObject"], f"arn:aws:s3:::{BUCKET_PLACEHOLDER}/*")])

PRIVATE_POLICY = _document([])

BUILTIN_POLICIES: dict[PolicyType, str] = {
    PolicyType.PUBLIC: PUBLIC_POLICY,
    PolicyType.READONLY: READONLY_POLICY,
    PolicyType.PRIVATE: PRIVATE_POLICY,
}

BUILTIN_DESCRIPTIONS: dict[PolicyType, str] = {
    PolicyType.PUBLIC: "Public access - anonymous read, write and delete",
    PolicyType.READONLY: "Read-only access - anonymous read",
    PolicyType.PRIVATE: "Private access - no anonymous access",
}


def readonly_bucket_policy(bucket: str) -> str:
    """Read-only policy for ``bucket``, applied to newly created buckets."""
    return READONLY_POLICY.replace(BUCKET_PLACEHOLDER, bucket)


def custom_bucket_policy(bucket: str, actions: list[str]) -> str:
    """Allow anonymous ``actions`` on every object of ``bucket``."""
    return _document([_allow(list(actions), f"arn:aws:s3:::{bucket}/*")])
