"""Pydantic schemas for the policy template API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PolicyTemplateCreate(BaseModel):
    """Payload for registering a policy template."""

    template_name: str = Field(..., min_length=1, max_length=128, examples=["archive"])
    description: str = Field(..., min_length=1, max_length=500)
    policy_type: str = Field(
        ...,
        description="One of public, readonly, private, custom",
        examples=["custom"],
    )
    policy: str | None = Field(
        None,
        description="Policy JSON; required for custom templates. '{bucket}' is substituted on apply",
    )


class PolicyTemplateUpdate(BaseModel):
    """Payload for replacing a policy template."""

    description: str = Field(..., min_length=1, max_length=500)
    policy_type: str
    policy: str | None = None


class PolicyTemplateRead(BaseModel):
    """Policy template returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    template_name: str
    description: str
    policy_type: str
    policy: str
    created_at: datetime
    updated_at: datetime
    builtin: bool = False


class PolicyApplyResponse(BaseModel):
    bucket: str
    template_name: str
    policy: str
