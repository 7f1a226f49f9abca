# src/analysis/photo_identifier.py — v1
"""Photo defect identification flow against the shared reference cache."""

from __future__ import annotations

import logging
import time
import uuid

from pydantic import BaseModel

from inspectcache.analysis.models import PhotoIdentificationResult
from inspectcache.analysis.prompts import build_identification_prompt
from inspectcache.analysis.response_parser import extract_and_validate
from inspectcache.cache.manager import ContextCacheManager
from inspectcache.cache.models import CacheHandle
from inspectcache.config.settings import Settings
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.llm.models import ImageInput, Message
from inspectcache.logging.context import set_request_context, set_scope_context

logger = logging.getLogger(__name__)


class PhotoIdentification(BaseModel):
    result: PhotoIdentificationResult
    cache_handle: CacheHandle
    cache_hit: bool
    processing_time_s: float


class PhotoIdentifier:
    """Identifies likely defect types in a photo."""

    def __init__(
        self,
        manager: ContextCacheManager,
        provider: BaseLLMClient,
        settings: Settings | None = None,
    ) -> None:
        if manager.family.shared_scope is None:
            raise ValueError("PhotoIdentifier requires a shared-scope family")
        self._manager = manager
        self._provider = provider
        self._settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
        self._scope = manager.family.shared_scope

    async def identify(
        self,
        image: bytes,
        media_type: str = "image/jpeg",
        request_id: str | None = None,
    ) -> PhotoIdentification:
        """Return the top defect-type matches for a photo.

        Raises:
            NoReferenceDocumentsError: If the reference folder is empty.
            ProviderRegistrationFailure: If the reference cache cannot be built.
            MalformedResponse: If the answer fails extraction or validation.
        """
        start = time.monotonic()
        set_request_context(request_id or uuid.uuid4().hex, "photo_identification")
        set_scope_context(self._scope)
        logger.info("Starting defect identification (%d bytes)", len(image))

        resolved = await self._manager.resolve(self._scope)

        response = await self._provider.complete_with_vision(
            [Message(role="user", content=build_identification_prompt())],
            [ImageInput(data=image, media_type=media_type)],
            cached_context=resolved.cache_handle,
            max_tokens=self._settings.llm_max_output_tokens,
            temperature=self._settings.llm_temperature,
            response_mime_type="application/json",
        )
        result = extract_and_validate(
            response.content,
            PhotoIdentificationResult,
            max_output_tokens=self._settings.llm_max_output_tokens,
        )

        elapsed = time.monotonic() - start
        logger.info(
            "Defect identification complete in %.1fs (%d matches)",
            elapsed, len(result.matches),
        )
        return PhotoIdentification(
            result=result,
            cache_handle=resolved.cache_handle,
            cache_hit=resolved.cache_hit,
            processing_time_s=elapsed,
        )
