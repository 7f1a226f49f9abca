# src/api/facade.py — v3
"""Public API facade — build the cache subsystem from settings.

Usage:
    from inspectcache.api.facade import analyze_defect
    analysis = await analyze_defect(defect)

Every entry point accepts pre-built collaborators so a long-lived process
can construct the provider client and stores once and reuse them.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from inspectcache.analysis.defect_analyzer import DefectAnalysis, DefectAnalyzer
from inspectcache.analysis.models import DefectEntry
from inspectcache.analysis.photo_identifier import PhotoIdentification, PhotoIdentifier
from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.cache_factory import create_cache_store
from inspectcache.cache.invalidation import InvalidationTrigger
from inspectcache.cache.manager import ContextCacheManager
from inspectcache.config.scopes import (
    DEFECT_IDENTIFIER_FAMILY,
    PROCEDURES_FAMILY,
    ScopeFamily,
    defect_identifier_family,
    get_family,
    procedures_family,
)
from inspectcache.config.settings import Settings
from inspectcache.extraction.base_extractor import BaseExtractor
from inspectcache.extraction.pdf_extractor import PdfExtractor
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.llm.client_factory import create_llm_client_from_settings
from inspectcache.storage.base_object_store import BaseObjectStore
from inspectcache.storage.object_store_factory import create_object_store

logger = logging.getLogger(__name__)


def build_manager(
    family: ScopeFamily | str,
    settings: Settings | None = None,
    provider: BaseLLMClient | None = None,
    object_store: BaseObjectStore | None = None,
    store: BaseCacheStore | None = None,
    extractor: BaseExtractor | None = None,
) -> ContextCacheManager:
    """Assemble a ContextCacheManager, creating missing collaborators."""
    settings = settings or Settings()
    if isinstance(family, str):
        family = get_family(family, settings)

    return ContextCacheManager(
        family=family,
        store=store or create_cache_store(family.collection, settings),
        provider=provider or create_llm_client_from_settings(settings),
        object_store=object_store or create_object_store(settings),
        extractor=extractor or PdfExtractor(),
        ttl=timedelta(hours=settings.cache_ttl_hours),
    )


def build_triggers(
    settings: Settings | None = None,
    stores: dict[str, BaseCacheStore] | None = None,
) -> list[InvalidationTrigger]:
    """One invalidation trigger per scope family."""
    settings = settings or Settings()
    stores = stores or {}
    triggers: list[InvalidationTrigger] = []
    for family in (procedures_family(settings), defect_identifier_family(settings)):
        store = stores.get(family.name) or create_cache_store(family.collection, settings)
        triggers.append(InvalidationTrigger(family, store))
    return triggers


async def handle_storage_event(
    event: dict[str, Any],
    settings: Settings | None = None,
    triggers: list[InvalidationTrigger] | None = None,
) -> list[str]:
    """Apply an S3 event notification to every scope family.

    Returns:
        Scopes whose cache invalidation was attempted.
    """
    triggers = triggers if triggers is not None else build_triggers(settings)
    scopes: list[str] = []
    for trigger in triggers:
        scopes.extend(await trigger.handle_s3_event(event))
    logger.info("Storage event handled, %d scope(s) invalidated", len(scopes))
    return scopes


async def analyze_defect(
    defect: DefectEntry | dict[str, Any],
    settings: Settings | None = None,
    manager: ContextCacheManager | None = None,
    provider: BaseLLMClient | None = None,
) -> DefectAnalysis:
    """Assess a defect against its client's cached procedures.

    A supplied manager brings its own provider client; ``provider`` is only
    used when the manager is built here.
    """
    settings = settings or Settings()
    if isinstance(defect, dict):
        defect = DefectEntry.model_validate(defect)
    if manager is None:
        provider = provider or create_llm_client_from_settings(settings)
        manager = build_manager(PROCEDURES_FAMILY, settings, provider=provider)
    return await DefectAnalyzer(manager, manager.provider, settings).analyze(defect)


async def identify_photo(
    image: bytes,
    media_type: str = "image/jpeg",
    settings: Settings | None = None,
    manager: ContextCacheManager | None = None,
    provider: BaseLLMClient | None = None,
) -> PhotoIdentification:
    """Identify likely defect types in a photo against the shared references."""
    settings = settings or Settings()
    if manager is None:
        provider = provider or create_llm_client_from_settings(settings)
        manager = build_manager(DEFECT_IDENTIFIER_FAMILY, settings, provider=provider)
    return await PhotoIdentifier(manager, manager.provider, settings).identify(
        image, media_type=media_type
    )
