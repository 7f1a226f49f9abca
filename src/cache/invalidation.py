# src/cache/invalidation.py — v1
"""Invalidation triggers: drop cache records when reference documents change.

Any qualifying upload or delete in a scope's folder removes the record,
without checking whether the document content actually differs. The
provider-side context is left to expire on its own TTL.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote_plus

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.config.scopes import ScopeFamily

logger = logging.getLogger(__name__)


async def invalidate(store: BaseCacheStore, scope: str) -> bool:
    """Delete the record for ``scope`` if there is one.

    Returns:
        True if a record was deleted, False if there was nothing to delete.
    """
    logger.info("Invalidating cache for %s", scope)
    if await store.get(scope) is None:
        logger.info("No cache to invalidate for %s", scope)
        return False

    await store.delete(scope)
    logger.info(
        "Cache invalidated for %s. Next analysis will create a fresh cache.",
        scope,
    )
    return True


class InvalidationTrigger:
    """Maps object-store events of one scope family onto cache invalidation."""

    def __init__(self, family: ScopeFamily, store: BaseCacheStore) -> None:
        self._family = family
        self._store = store

    def scope_for_object(self, object_name: str | None) -> str | None:
        """Return the scope affected by an object, or None if it is ignored."""
        if not object_name or not object_name.startswith(self._family.watch_prefix):
            return None
        if not object_name.endswith(self._family.document_suffix):
            return None

        if self._family.shared_scope is not None:
            return self._family.shared_scope

        # <root_prefix>{scope}/file.pdf
        relative = object_name[len(self._family.root_prefix):]
        parts = relative.split("/")
        if len(parts) < 2 or not parts[0]:
            logger.warning("Invalid reference document path: %s", object_name)
            return None
        return parts[0]

    async def on_object_finalized(self, object_name: str | None) -> str | None:
        """Handle an upload (create or overwrite) event."""
        return await self._handle(object_name, "uploaded")

    async def on_object_deleted(self, object_name: str | None) -> str | None:
        """Handle a delete event."""
        return await self._handle(object_name, "deleted")

    async def handle_s3_event(self, event: dict[str, Any]) -> list[str]:
        """Dispatch an S3 event notification to the upload/delete handlers.

        Returns:
            Scopes whose invalidation was attempted.
        """
        scopes: list[str] = []
        for record in event.get("Records", []):
            event_name = record.get("eventName", "")
            key = unquote_plus(record.get("s3", {}).get("object", {}).get("key", ""))

            if event_name.startswith("ObjectCreated"):
                scope = await self.on_object_finalized(key)
            elif event_name.startswith("ObjectRemoved"):
                scope = await self.on_object_deleted(key)
            else:
                logger.debug("Ignoring S3 event %s for %s", event_name, key)
                continue

            if scope is not None:
                scopes.append(scope)
        return scopes

    async def _handle(self, object_name: str | None, action: str) -> str | None:
        scope = self.scope_for_object(object_name)
        if scope is None:
            return None

        logger.info(
            "Reference document %s for %s: %s. Invalidating cache...",
            action, scope, object_name,
        )
        try:
            await invalidate(self._store, scope)
        except Exception:
            # TTL expiry or the next fingerprint check recovers.
            logger.error(
                "Error invalidating cache for %s", scope, exc_info=True
            )
        return scope
