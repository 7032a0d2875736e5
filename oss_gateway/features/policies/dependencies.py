"""Dependencies for policy template endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from .registry import PolicyTemplateRegistry


def get_policy_registry(request: Request) -> PolicyTemplateRegistry:
    """Return the registry created by the application lifespan."""
    return request.app.state.policy_registry


PolicyRegistry = Annotated[PolicyTemplateRegistry, Depends(get_policy_registry)]
