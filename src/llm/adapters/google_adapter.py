# src/llm/adapters/google_adapter.py — v3
"""Google Gemini adapter implementing BaseLLMClient.

Uses google-generativeai SDK. Hosted context goes through
``genai.caching.CachedContent``; completions against it are issued from
``GenerativeModel.from_cached_content``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import Any

from inspectcache.cache.models import CacheHandle
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.llm.models import ImageInput, LLMResponse, Message

logger = logging.getLogger(__name__)


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self, model: str = "gemini-2.5-flash", api_key: str = "", **kwargs: Any
    ):
        self._model = model
        self._api_key = api_key

    async def register_context(
        self,
        contents: str,
        system_instruction: str,
        ttl: timedelta,
        display_name: str | None = None,
    ) -> str:
        genai = self._configure()

        cached = await asyncio.to_thread(
            genai.caching.CachedContent.create,
            model=self._model,
            display_name=display_name,
            system_instruction=system_instruction,
            contents=[{"role": "user", "parts": [{"text": contents}]}],
            ttl=ttl,
        )
        name = getattr(cached, "name", None) or ""
        logger.debug("Registered cached content %r (ttl=%s)", name, ttl)
        return name

    async def complete(
        self,
        messages: list[Message],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        contents = []
        for m in messages:
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})

        return await self._generate(
            contents, cached_context, max_tokens, temperature, response_mime_type
        )

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        parts: list[dict[str, Any]] = []
        for img in images:
            parts.append({"inline_data": {"mime_type": img.media_type, "data": img.data}})
        for m in messages:
            parts.append({"text": m.content})

        contents = [{"role": "user", "parts": parts}]
        return await self._generate(
            contents, cached_context, max_tokens, temperature, response_mime_type
        )

    @property
    def provider_name(self) -> str:
        return "google"

    def _configure(self) -> Any:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        return genai

    async def _generate(
        self,
        contents: list[dict[str, Any]],
        cached_context: CacheHandle | None,
        max_tokens: int,
        temperature: float,
        response_mime_type: str | None,
    ) -> LLMResponse:
        genai = self._configure()

        if cached_context is not None:
            # Resolving the cached content is a blocking lookup in the SDK.
            model = await asyncio.to_thread(
                genai.GenerativeModel.from_cached_content,
                cached_content=cached_context.name,
            )
        else:
            model = genai.GenerativeModel(self._model)

        gen_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_mime_type is not None:
            gen_config["response_mime_type"] = response_mime_type

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            contents, generation_config=gen_config,
        )
        latency = int((time.monotonic() - t0) * 1000)

        try:
            text = resp.text or ""
        except ValueError:
            # Raised by the SDK when the candidate carries no text parts.
            text = ""

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=text,
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            cache_read_tokens=(
                getattr(usage, "cached_content_token_count", 0) or 0
            ) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )
