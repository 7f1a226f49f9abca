# src/cache/lookup.py — v1
"""Cache lookup: decide whether a scope's materialized context is reusable.

Lookup is the only place expired or stale records are removed (lazy
eviction). It never contacts the inference provider.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.fingerprint import compute_fingerprint
from inspectcache.cache.models import CacheLookupResult, utc_now

logger = logging.getLogger(__name__)


class CacheLookup:
    """Validates cache records against the current reference documents."""

    def __init__(
        self,
        store: BaseCacheStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    async def lookup(
        self, scope: str, current_document_ids: Iterable[str]
    ) -> CacheLookupResult:
        """Check the record for ``scope`` and account for a hit.

        Returns a MISSING result on any store failure.
        """
        try:
            return await self._lookup(scope, set(current_document_ids))
        except Exception:
            logger.error(
                "Cache lookup failed for %s, treating as miss", scope,
                exc_info=True,
            )
            return CacheLookupResult(status="missing")

    async def _lookup(
        self, scope: str, current_document_ids: set[str]
    ) -> CacheLookupResult:
        record = await self._store.get(scope)
        if record is None:
            logger.info("No cache found for %s", scope)
            return CacheLookupResult(status="missing")

        now = self._clock()
        if record.is_expired(now):
            logger.info(
                "Cache expired for %s (expired at %s)",
                scope, record.expires_at.isoformat(),
            )
            await self._store.delete(scope)
            return CacheLookupResult(status="expired")

        current_hash = compute_fingerprint(current_document_ids)
        if record.fingerprint != current_hash:
            logger.info(
                "Reference documents changed for %s (hash mismatch: %s vs %s)",
                scope, record.fingerprint, current_hash,
            )
            await self._store.delete(scope)
            return CacheLookupResult(status="stale")

        updated = await self._store.record_usage(scope, now)
        if updated is None:
            logger.info("Cache for %s disappeared during lookup", scope)
            return CacheLookupResult(status="missing")

        logger.info(
            "Valid cache found for %s: %s (usage: %d)",
            scope, updated.cache_handle, updated.usage_count,
        )
        return CacheLookupResult(
            status="valid", cache_handle=updated.cache_handle, record=updated
        )
