"""Named bucket policy templates."""

from .registry import PolicyTemplateRegistry
from .router import router
from .templates import PolicyTemplate, PolicyType

__all__ = ["PolicyTemplate", "PolicyTemplateRegistry", "PolicyType", "router"]
