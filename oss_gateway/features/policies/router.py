"""Policy template API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from oss_gateway.core.schemas.common import MessageResponse
from oss_gateway.infra.storage.dependencies import Storage

from .dependencies import PolicyRegistry
from .registry import PolicyTemplateRegistry
from .schemas import (
    PolicyApplyResponse,
    PolicyTemplateCreate,
    PolicyTemplateRead,
    PolicyTemplateUpdate,
)
from .templates import PolicyTemplate

router = APIRouter(prefix="/policies", tags=["policies"])


def _to_read(template: PolicyTemplate) -> PolicyTemplateRead:
    read = PolicyTemplateRead.model_validate(template)
    read.builtin = PolicyTemplateRegistry.is_builtin(template.template_name)
    return read


@router.post(
    "",
    response_model=PolicyTemplateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a policy template",
)
async def create_policy_template(
    request: PolicyTemplateCreate,
    registry: PolicyRegistry,
) -> PolicyTemplateRead:
    template = registry.create(
        template_name=request.template_name,
        description=request.description,
        policy_type=request.policy_type,
        policy=request.policy,
    )
    return _to_read(template)


@router.get("", response_model=list[PolicyTemplateRead], summary="List policy templates")
async def list_policy_templates(registry: PolicyRegistry) -> list[PolicyTemplateRead]:
    return [_to_read(template) for template in registry.list()]


@router.get(
    "/{template_name}",
    response_model=PolicyTemplateRead,
    summary="Get a policy template",
)
async def get_policy_template(template_name: str, registry: PolicyRegistry) -> PolicyTemplateRead:
    return _to_read(registry.get(template_name))


@router.put(
    "/{template_name}",
    response_model=PolicyTemplateRead,
    summary="Update a policy template",
    description="Built-in templates keep their policy type but their body may be edited.",
)
async def update_policy_template(
    template_name: str,
    request: PolicyTemplateUpdate,
    registry: PolicyRegistry,
) -> PolicyTemplateRead:
    template = registry.update(
        template_name=template_name,
        description=request.description,
        policy_type=request.policy_type,
        policy=request.policy,
    )
    return _to_read(template)


@router.delete(
    "/{template_name}",
    response_model=MessageResponse,
    summary="Delete a policy template",
)
async def delete_policy_template(template_name: str, registry: PolicyRegistry) -> MessageResponse:
    registry.delete(template_name)
    return MessageResponse(message=f"Policy template '{template_name}' deleted")


@router.post(
    "/{template_name}/apply/{bucket_name}",
    response_model=PolicyApplyResponse,
    summary="Apply a policy template to a bucket",
)
async def apply_policy_template(
    template_name: str,
    bucket_name: str,
    registry: PolicyRegistry,
    storage: Storage,
) -> PolicyApplyResponse:
    policy = await registry.apply(bucket_name, template_name, storage)
    return PolicyApplyResponse(bucket=bucket_name, template_name=template_name, policy=policy)
