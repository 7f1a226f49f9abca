# src/storage/base_object_store.py — v1
"""Abstract object store interface for reference documents."""

from __future__ import annotations

from abc import ABC, abstractmethod

from inspectcache.storage.models import StoredObject


class BaseObjectStore(ABC):
    """Unified interface for reference document storage backends."""

    @abstractmethod
    async def list(self, prefix: str) -> list[StoredObject]:
        """List objects whose name starts with ``prefix`` (recursive)."""

    @abstractmethod
    async def download(self, name: str) -> bytes:
        """Read the full content of an object."""

    @abstractmethod
    async def upload(self, name: str, content: bytes) -> None:
        """Create or overwrite an object."""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Remove an object."""
