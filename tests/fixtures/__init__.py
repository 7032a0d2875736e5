"""Test doubles shared across the suite."""

from .storage import InMemoryStorageBackend

__all__ = ["InMemoryStorageBackend"]
