# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a fake inference provider, a fixed clock, temp-dir stores and
sample cache records. No external services; all provider I/O is faked.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from inspectcache.cache.json_store import JsonCacheStore
from inspectcache.cache.models import CacheHandle, CacheRecord
from inspectcache.config.scopes import (
    ScopeFamily,
    defect_identifier_family,
    procedures_family,
)
from inspectcache.config.settings import Settings
from inspectcache.extraction.base_extractor import BaseExtractor
from inspectcache.llm.base_client import BaseLLMClient
from inspectcache.llm.models import ImageInput, LLMResponse, Message
from inspectcache.logging.context import clear_context
from inspectcache.storage.local_object_store import LocalObjectStore

T0 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)

VALID_DEFECT_ANSWER = (
    '{"repairRequired": true, "repairType": "Type B sleeve", '
    '"severity": "high", "recommendations": "Install sleeve per 4.2", '
    '"procedureReference": "Section 4.2, Table 3", "confidence": "high"}'
)

VALID_PHOTO_ANSWER = (
    '{"matches": ['
    '{"defectType": "Corrosion", "confidence": "high", "confidenceScore": 88, '
    '"visualIndicators": ["pitting", "rust staining"], '
    '"reasoning": "Pitted surface with oxide deposits", "severity": "medium"}, '
    '{"defectType": "Gouge", "confidence": "low", "confidenceScore": 20, '
    '"visualIndicators": ["linear mark"], "reasoning": "Single linear feature"}'
    ']}'
)


# === FAKES ===


class FakeClock:
    """Settable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeProvider(BaseLLMClient):
    """In-memory provider: counts registrations, replays canned answers."""

    def __init__(self, answer: str = VALID_DEFECT_ANSWER, **kwargs: Any):
        self.answer = answer
        self.registrations: list[dict[str, Any]] = []
        self.calls: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None
        self.handle_name: str | None = None
        self.register_attempts = 0

    async def register_context(
        self,
        contents: str,
        system_instruction: str,
        ttl: timedelta,
        display_name: str | None = None,
    ) -> str:
        self.register_attempts += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.registrations.append({
            "contents": contents,
            "system_instruction": system_instruction,
            "ttl": ttl,
            "display_name": display_name,
        })
        if self.handle_name is not None:
            return self.handle_name
        return f"cachedContents/ctx-{len(self.registrations)}"

    async def complete(
        self,
        messages: list[Message],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        self.calls.append({
            "messages": messages,
            "cached_context": cached_context,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "response_mime_type": response_mime_type,
        })
        return self._response()

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        cached_context: CacheHandle | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_mime_type: str | None = None,
    ) -> LLMResponse:
        self.calls.append({
            "messages": messages,
            "images": images,
            "cached_context": cached_context,
            "max_tokens": max_tokens,
            "response_mime_type": response_mime_type,
        })
        return self._response()

    @property
    def provider_name(self) -> str:
        return "fake"

    def _response(self) -> LLMResponse:
        return LLMResponse(
            content=self.answer, input_tokens=120, output_tokens=len(self.answer) // 4,
            cache_read_tokens=100, model="fake-model", provider="fake",
            latency_ms=5,
        )


class FakeExtractor(BaseExtractor):
    """Treats document bytes as UTF-8 text."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".pdf"]

    async def extract(self, content: bytes) -> str:
        return content.decode("utf-8")


def make_record(
    scope: str = "acme",
    document_ids: list[str] | None = None,
    created_at: datetime = T0,
    ttl: timedelta = timedelta(hours=72),
    handle: str = "cachedContents/abc",
    usage_count: int = 0,
) -> CacheRecord:
    from inspectcache.cache.fingerprint import compute_fingerprint

    ids = sorted(document_ids or [f"procedures/{scope}/a.pdf", f"procedures/{scope}/b.pdf"])
    return CacheRecord(
        scope=scope,
        cache_handle=CacheHandle(name=handle),
        document_ids=ids,
        fingerprint=compute_fingerprint(ids),
        character_count=1200,
        created_at=created_at,
        expires_at=created_at + ttl,
        last_used_at=created_at,
        usage_count=usage_count,
    )


# === FIXTURES ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        cache_root=tmp_path / "cache",
        object_store_root=tmp_path / "storage",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def procedures(settings: Settings) -> ScopeFamily:
    return procedures_family(settings)


@pytest.fixture
def defect_identifier(settings: Settings) -> ScopeFamily:
    return defect_identifier_family(settings)


@pytest.fixture
def json_store(tmp_path: Path) -> JsonCacheStore:
    return JsonCacheStore(cache_root=tmp_path / "cache", collection="procedure_caches")


@pytest.fixture
def object_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(root=tmp_path / "storage")


@pytest.fixture
def sample_record() -> CacheRecord:
    return make_record()
