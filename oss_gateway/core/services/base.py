"""Base service class for business logic."""

from __future__ import annotations

import logging


class BaseService:
    """Base class for service classes.

    Provides a logger named after the concrete class.

    Example:
        class PolicyService(BaseService):
            def apply(self, bucket: str) -> None:
                self.logger.info("Applying policy", extra={"bucket": bucket})
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
