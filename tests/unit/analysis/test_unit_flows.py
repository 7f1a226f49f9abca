# tests/unit/analysis/test_unit_flows.py — v1
"""Tests for analysis/defect_analyzer.py and analysis/photo_identifier.py."""

from __future__ import annotations

import pytest

from inspectcache.analysis.defect_analyzer import DefectAnalyzer
from inspectcache.analysis.models import DefectEntry
from inspectcache.analysis.photo_identifier import PhotoIdentifier
from inspectcache.analysis.response_parser import NoJsonFound, SchemaViolation
from inspectcache.cache.json_store import JsonCacheStore
from inspectcache.cache.manager import ContextCacheManager, NoReferenceDocumentsError
from inspectcache.logging.context import get_context
from tests.conftest import VALID_PHOTO_ANSWER


@pytest.fixture
def defect() -> DefectEntry:
    return DefectEntry(
        client_name="acme", defect_type="Dent", pipe_od=24, pipe_nwt=0.375,
        length=6, width=4, depth=0.9,
    )


@pytest.fixture
def procedures_manager(procedures, json_store, provider, object_store, extractor, clock):
    return ContextCacheManager(
        procedures, json_store, provider, object_store, extractor, clock=clock
    )


@pytest.fixture
def identifier_manager(defect_identifier, tmp_path, provider, object_store, extractor, clock):
    store = JsonCacheStore(tmp_path / "cache", "defect_identifier_cache")
    return ContextCacheManager(
        defect_identifier, store, provider, object_store, extractor, clock=clock
    )


class TestDefectAnalyzer:
    @pytest.mark.asyncio
    async def test_first_call_builds_cache(self, procedures_manager, provider, object_store, defect, settings):
        await object_store.upload("procedures/acme/dents.pdf", b"Dents over 6% OD require repair")
        analysis = await DefectAnalyzer(procedures_manager, provider, settings).analyze(defect)

        assert analysis.cache_hit is False
        assert analysis.result.repair_required is True
        assert analysis.result.severity == "high"
        assert len(provider.registrations) == 1

        call = provider.calls[0]
        assert call["cached_context"] == analysis.cache_handle
        assert call["response_mime_type"] == "application/json"
        assert call["max_tokens"] == settings.llm_max_output_tokens
        assert "Type: Dent" in call["messages"][0].content

    @pytest.mark.asyncio
    async def test_second_call_hits(self, procedures_manager, provider, object_store, defect):
        await object_store.upload("procedures/acme/dents.pdf", b"procedure text")
        analyzer = DefectAnalyzer(procedures_manager, provider)
        first = await analyzer.analyze(defect)
        second = await analyzer.analyze(defect)
        assert second.cache_hit is True
        assert second.cache_handle == first.cache_handle
        assert len(provider.registrations) == 1

    @pytest.mark.asyncio
    async def test_sets_log_context(self, procedures_manager, provider, object_store, defect):
        await object_store.upload("procedures/acme/dents.pdf", b"procedure text")
        await DefectAnalyzer(procedures_manager, provider).analyze(defect, request_id="req-7")
        ctx = get_context()
        assert ctx.request_id == "req-7"
        assert ctx.flow == "defect_analysis"
        assert ctx.scope == "acme"

    @pytest.mark.asyncio
    async def test_no_procedures(self, procedures_manager, provider, defect):
        with pytest.raises(NoReferenceDocumentsError):
            await DefectAnalyzer(procedures_manager, provider).analyze(defect)
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_malformed_answer(self, procedures_manager, provider, object_store, defect):
        await object_store.upload("procedures/acme/dents.pdf", b"procedure text")
        provider.answer = "I could not determine this."
        with pytest.raises(NoJsonFound):
            await DefectAnalyzer(procedures_manager, provider).analyze(defect)

    @pytest.mark.asyncio
    async def test_schema_violation(self, procedures_manager, provider, object_store, defect):
        await object_store.upload("procedures/acme/dents.pdf", b"procedure text")
        provider.answer = '{"repairRequired": true, "severity": "catastrophic", "confidence": "high"}'
        with pytest.raises(SchemaViolation) as exc_info:
            await DefectAnalyzer(procedures_manager, provider).analyze(defect)
        assert exc_info.value.field == "severity"


class TestPhotoIdentifier:
    @pytest.mark.asyncio
    async def test_identify(self, identifier_manager, provider, object_store, settings):
        await object_store.upload(
            "procedures/defectidentifiertool/corrosion.pdf", b"Corrosion shows pitting"
        )
        provider.answer = VALID_PHOTO_ANSWER
        identification = await PhotoIdentifier(identifier_manager, provider, settings).identify(
            b"\x89PNG...", media_type="image/png"
        )

        assert identification.cache_hit is False
        assert identification.result.matches[0].defect_type == "Corrosion"
        assert identification.result.matches[1].severity == "unknown"
        assert identification.processing_time_s >= 0

        call = provider.calls[0]
        assert call["images"][0].media_type == "image/png"
        assert call["images"][0].data == b"\x89PNG..."
        assert call["cached_context"] == identification.cache_handle

    @pytest.mark.asyncio
    async def test_shared_scope_context(self, identifier_manager, provider, object_store):
        await object_store.upload("procedures/defectidentifiertool/a.pdf", b"ref")
        provider.answer = VALID_PHOTO_ANSWER
        await PhotoIdentifier(identifier_manager, provider).identify(b"img")
        assert get_context().scope == "defectidentifiertool"
        assert get_context().flow == "photo_identification"

    def test_requires_shared_family(self, procedures_manager, provider):
        with pytest.raises(ValueError, match="shared-scope"):
            PhotoIdentifier(procedures_manager, provider)

    @pytest.mark.asyncio
    async def test_empty_matches_rejected(self, identifier_manager, provider, object_store):
        await object_store.upload("procedures/defectidentifiertool/a.pdf", b"ref")
        provider.answer = '{"matches": []}'
        with pytest.raises(SchemaViolation) as exc_info:
            await PhotoIdentifier(identifier_manager, provider).identify(b"img")
        assert exc_info.value.field == "matches"
