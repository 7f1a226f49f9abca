# src/cache/materializer.py — v1
"""Cache materialization: build provider-hosted context for a scope.

This is the only code path that calls the provider's context
registration endpoint (slow path). The resulting record replaces any
existing one for the scope unconditionally.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta

from pydantic import ValidationError

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.fingerprint import compute_fingerprint
from inspectcache.cache.models import CacheHandle, CacheRecord, utc_now
from inspectcache.config.scopes import ScopeFamily
from inspectcache.config.settings import MAX_CACHE_TTL_HOURS
from inspectcache.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=MAX_CACHE_TTL_HOURS)

# Separator between reference documents inside the context body.
DOCUMENT_SEPARATOR = "\n\n"


class ProviderRegistrationFailure(Exception):
    """The provider did not return a handle for the registered context."""

    def __init__(self, scope: str, reason: str):
        self.scope = scope
        self.reason = reason
        super().__init__(f"Failed to create cache for {scope!r}: {reason}")


class CacheMaterializer:
    """Registers reference text with the provider and persists its record."""

    def __init__(
        self,
        store: BaseCacheStore,
        provider: BaseLLMClient,
        family: ScopeFamily,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        self._store = store
        self._provider = provider
        self._family = family
        self._clock = clock
        self._ttl = ttl

    async def materialize(
        self,
        scope: str,
        document_texts: Sequence[str],
        document_ids: Iterable[str],
    ) -> CacheHandle:
        """Build a new context for ``scope`` and store its record.

        Args:
            scope: Cache scope key.
            document_texts: Extracted reference texts, joined in input order.
            document_ids: Identifier set the texts were built from.

        Returns:
            Handle of the newly registered context.

        Raises:
            ValueError: If there is no reference text to register.
            ProviderRegistrationFailure: If registration fails or yields no
                handle. Not retried.
        """
        document_ids = sorted(set(document_ids))
        if not document_texts:
            raise ValueError(f"No reference text to cache for {scope!r}")

        logger.info(
            "Creating cache for %s with %d document(s)", scope, len(document_ids)
        )
        body = DOCUMENT_SEPARATOR.join(document_texts)
        logger.info("Total reference text: %d characters", len(body))

        handle = await self._register(scope, body)
        logger.info("Cache created successfully: %s", handle)

        now = self._clock()
        record = CacheRecord(
            scope=scope,
            cache_handle=handle,
            document_ids=document_ids,
            fingerprint=compute_fingerprint(document_ids),
            character_count=len(body),
            created_at=now,
            expires_at=now + self._ttl,
            last_used_at=now,
            usage_count=0,
        )
        await self._store.put(scope, record)

        logger.info(
            "Cache record saved for %s (expires: %s)",
            scope, record.expires_at.isoformat(),
        )
        return handle

    async def _register(self, scope: str, body: str) -> CacheHandle:
        contents = f"{self._family.header_for(scope)}\n\n{body}"
        try:
            name = await self._provider.register_context(
                contents=contents,
                system_instruction=self._family.system_instruction,
                ttl=self._ttl,
                display_name=f"{self._family.collection}:{scope}",
            )
        except Exception as e:
            logger.error("Error creating cache for %s: %s", scope, e)
            raise ProviderRegistrationFailure(scope, str(e)) from e

        try:
            return CacheHandle(name=name)
        except ValidationError as e:
            raise ProviderRegistrationFailure(
                scope, "cache creation returned no cache ID"
            ) from e
