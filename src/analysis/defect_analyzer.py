# src/analysis/defect_analyzer.py — v1
"""Defect analysis flow: client procedures (cached) + defect measurements.

Resolves the client's procedure context through the cache manager, asks
the model for a repair assessment and validates the answer.
"""

from __future__ import annotations

import logging
import uuid

from pydantic import BaseModel

from inspectcache.analysis.models import DefectAnalysisResult, DefectEntry
from inspectcache.analysis.prompts import build_defect_prompt
from inspectcache.analysis.response_parser import extract_and_validate
from inspectcache.cache.manager import ContextCacheManager
from inspectcache.cache.models import CacheHandle
from inspectcache.config.settings import Settings
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.llm.models import Message
from inspectcache.logging.context import set_request_context, set_scope_context

logger = logging.getLogger(__name__)


class DefectAnalysis(BaseModel):
    """Validated assessment plus the cache resolution that produced it."""

    result: DefectAnalysisResult
    cache_handle: CacheHandle
    cache_hit: bool


class DefectAnalyzer:
    """Runs repair assessments against per-client procedure caches."""

    def __init__(
        self,
        manager: ContextCacheManager,
        provider: BaseLLMClient,
        settings: Settings | None = None,
    ) -> None:
        self._manager = manager
        self._provider = provider
        self._settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]

    async def analyze(
        self, defect: DefectEntry, request_id: str | None = None
    ) -> DefectAnalysis:
        """Assess one defect.

        Raises:
            NoReferenceDocumentsError: If the client has no procedures.
            ProviderRegistrationFailure: If the procedure cache cannot be built.
            MalformedResponse: If the answer fails extraction or validation.
        """
        set_request_context(request_id or uuid.uuid4().hex, "defect_analysis")
        set_scope_context(defect.client_name)
        logger.info("Starting analysis for %s defect", defect.defect_type)

        resolved = await self._manager.resolve(defect.client_name)

        logger.info("Calling model with cached context %s", resolved.cache_handle)
        response = await self._provider.complete(
            [Message(role="user", content=build_defect_prompt(defect))],
            cached_context=resolved.cache_handle,
            max_tokens=self._settings.llm_max_output_tokens,
            temperature=self._settings.llm_temperature,
            response_mime_type="application/json",
        )
        logger.info(
            "Received response (%d characters, %d ms)",
            len(response.content), response.latency_ms,
        )

        result = extract_and_validate(
            response.content,
            DefectAnalysisResult,
            max_output_tokens=self._settings.llm_max_output_tokens,
        )
        return DefectAnalysis(
            result=result,
            cache_handle=resolved.cache_handle,
            cache_hit=resolved.cache_hit,
        )
