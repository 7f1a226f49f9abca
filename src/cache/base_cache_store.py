# src/cache/base_cache_store.py — v2
"""Abstract cache record store interface.

One store instance addresses one collection (scope family). Records are
keyed by scope and follow create-or-replace semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from inspectcache.cache.models import CacheRecord


class BaseCacheStore(ABC):
    """Unified interface for cache record backends."""

    @abstractmethod
    async def get(self, scope: str) -> CacheRecord | None:
        """Retrieve the record for a scope."""

    @abstractmethod
    async def put(self, scope: str, record: CacheRecord) -> None:
        """Store a record, replacing any existing one."""

    @abstractmethod
    async def delete(self, scope: str) -> None:
        """Remove the record for a scope (no-op when absent)."""

    @abstractmethod
    async def record_usage(
        self, scope: str, used_at: datetime
    ) -> CacheRecord | None:
        """Atomically increment usage_count and set last_used_at.

        Returns:
            The updated record, or None if the scope has no record.
        """

    @abstractmethod
    async def list_records(self) -> list[CacheRecord]:
        """List all records in the collection (monitoring)."""
