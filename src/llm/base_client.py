# src/llm/base_client.py — v2
"""Abstract inference provider interface.

A provider hosts precomputed context (registered once, referenced by an
opaque handle) and answers completions against it. Clients are built once
and injected; they hold configuration only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta

from inspectcache.cache.models import CacheHandle
from inspectcache.llm.models import ImageInput, LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for context-caching LLM providers."""

    @abstractmethod
    async def register_context(
        self,
        contents: str,
        system_instruction: str,
        ttl: timedelta,
        display_name: str | None = None,
    ) -> str:
        """Upload context to the provider and return its resource name.

        An empty string means the provider accepted the call but returned
        no handle.
        """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        """Text completion, optionally against hosted context."""

    @abstractmethod
    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        """Vision-enabled completion (images + text)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, ...)."""
