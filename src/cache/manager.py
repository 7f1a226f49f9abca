# src/cache/manager.py — v1
"""Context cache manager: the fast path / slow path every handler runs.

Usage:
    manager = ContextCacheManager(family, store, provider, object_store, extractor)
    resolved = await manager.resolve("acme")
    response = await provider.complete(messages, cached_context=resolved.cache_handle)

The manager only wires the collaborators together; validity rules live in
CacheLookup, context construction in CacheMaterializer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.invalidation import invalidate
from inspectcache.cache.lookup import CacheLookup
from inspectcache.cache.materializer import DEFAULT_TTL, CacheMaterializer
from inspectcache.cache.models import CacheHandle, CacheLookupResult, CacheRecord, utc_now
from inspectcache.config.scopes import ScopeFamily
from inspectcache.extraction.base_extractor import BaseExtractor
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.storage.base_object_store import BaseObjectStore

logger = logging.getLogger(__name__)


class NoReferenceDocumentsError(Exception):
    """The scope's folder holds no reference documents."""

    def __init__(self, scope: str, folder: str):
        self.scope = scope
        self.folder = folder
        super().__init__(f"No reference documents found for {scope!r} in {folder}")


class ResolvedContext(BaseModel):
    """Context handle to use for one analysis call."""

    scope: str
    cache_handle: CacheHandle
    cache_hit: bool
    document_ids: list[str]


class ContextCacheManager:
    """Resolves, builds and invalidates hosted context for one scope family."""

    def __init__(
        self,
        family: ScopeFamily,
        store: BaseCacheStore,
        provider: BaseLLMClient,
        object_store: BaseObjectStore,
        extractor: BaseExtractor,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        self._family = family
        self._store = store
        self._provider = provider
        self._object_store = object_store
        self._extractor = extractor
        self._lookup = CacheLookup(store, clock=clock)
        self._materializer = CacheMaterializer(
            store, provider, family, clock=clock, ttl=ttl
        )

    @property
    def family(self) -> ScopeFamily:
        return self._family

    @property
    def provider(self) -> BaseLLMClient:
        return self._provider

    async def lookup(
        self, scope: str, current_document_ids: Iterable[str]
    ) -> CacheLookupResult:
        return await self._lookup.lookup(scope, current_document_ids)

    async def materialize(
        self,
        scope: str,
        document_texts: Sequence[str],
        document_ids: Iterable[str],
    ) -> CacheHandle:
        return await self._materializer.materialize(scope, document_texts, document_ids)

    async def invalidate(self, scope: str) -> bool:
        return await invalidate(self._store, scope)

    async def list_records(self) -> list[CacheRecord]:
        return await self._store.list_records()

    async def list_document_ids(self, scope: str) -> list[str]:
        """Names of the reference documents currently in the scope's folder.

        Listing failures are logged and reported as an empty folder.
        """
        folder = self._family.folder_for(scope)
        try:
            objects = await self._object_store.list(folder)
        except Exception:
            logger.error("Error listing reference documents in %s", folder, exc_info=True)
            return []

        names = [
            obj.name for obj in objects
            if obj.name.endswith(self._family.document_suffix)
        ]
        logger.info("Found %d reference document(s) for %s", len(names), scope)
        return names

    async def load_document_texts(self, scope: str) -> list[str]:
        """Download and extract every reference document of a scope.

        Documents that fail to download or extract, or yield no text, are
        skipped.
        """
        texts: list[str] = []
        for name in await self.list_document_ids(scope):
            try:
                content = await self._object_store.download(name)
                text = await self._extractor.extract(content)
            except Exception:
                logger.error("Error processing %s", name, exc_info=True)
                continue

            if not text or not text.strip():
                logger.warning("No text extracted from %s", name)
                continue

            texts.append(f"\n=== {name} ===\n{text}\n")
            logger.info("Extracted %d characters from %s", len(text), name)
        return texts

    async def resolve(self, scope: str) -> ResolvedContext:
        """Return a usable context handle, reusing the cache when valid.

        Raises:
            NoReferenceDocumentsError: If the scope folder is empty.
            ProviderRegistrationFailure: If a rebuild could not register.
        """
        document_ids = await self.list_document_ids(scope)
        if not document_ids:
            raise NoReferenceDocumentsError(scope, self._family.folder_for(scope))

        result = await self.lookup(scope, document_ids)
        if result.is_valid and result.cache_handle is not None:
            logger.info("Using cached context for %s (cache hit)", scope)
            return ResolvedContext(
                scope=scope,
                cache_handle=result.cache_handle,
                cache_hit=True,
                document_ids=document_ids,
            )

        logger.info(
            "No valid cache for %s (%s). Creating new cache...", scope, result.status
        )
        texts = await self.load_document_texts(scope)
        logger.info("Extracted text from %d reference document(s)", len(texts))
        handle = await self.materialize(scope, texts, document_ids)
        return ResolvedContext(
            scope=scope,
            cache_handle=handle,
            cache_hit=False,
            document_ids=document_ids,
        )
