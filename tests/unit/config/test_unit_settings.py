# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from inspectcache.config.settings import (
    MAX_CACHE_TTL_HOURS,
    ConfigurationError,
    Settings,
    load_settings,
)


class TestSettingsDefaults:
    def test_default_provider(self):
        s = Settings(_env_file=None)
        assert s.llm_provider == "google"
        assert s.llm_model == "gemini-2.5-flash"
        assert s.llm_max_output_tokens == 4096

    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "json"
        assert s.cache_ttl_hours == MAX_CACHE_TTL_HOURS == 72

    def test_default_layout(self):
        s = Settings(_env_file=None)
        assert s.procedures_prefix == "procedures/"
        assert s.defect_identifier_scope == "defectidentifiertool"
        assert s.reference_document_suffix == ".pdf"

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_format == "json"
        assert s.log_file is None


class TestSettingsValidation:
    def test_redis_without_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_s3_without_bucket(self):
        with pytest.raises(ConfigurationError, match="OBJECT_STORE_S3_BUCKET"):
            Settings(_env_file=None, object_store="s3")

    def test_errors_are_combined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, cache_backend="redis", object_store="s3")
        assert "; " in str(exc_info.value)

    def test_max_tokens_positive(self):
        with pytest.raises(ConfigurationError, match="LLM_MAX_OUTPUT_TOKENS"):
            Settings(_env_file=None, llm_max_output_tokens=0)

    @pytest.mark.parametrize("ttl", [0, -1, 73])
    def test_ttl_bounds(self, ttl):
        with pytest.raises(ValidationError, match="cache_ttl_hours"):
            Settings(_env_file=None, cache_ttl_hours=ttl)

    def test_ttl_within_bounds(self):
        assert Settings(_env_file=None, cache_ttl_hours=24).cache_ttl_hours == 24

    @pytest.mark.parametrize("raw", ["procedures", "/procedures/", " procedures// "])
    def test_prefix_normalized(self, raw):
        assert Settings(_env_file=None, procedures_prefix=raw).procedures_prefix == "procedures/"

    def test_empty_prefix(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, procedures_prefix="/")

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="memcached")


class TestEnvironment:
    def test_reads_env_vars(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "sqlite")
        monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
        s = Settings(_env_file=None)
        assert s.cache_backend == "sqlite"
        assert s.google_api_key == "from-env"

    def test_reads_env_file(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("LLM_MODEL=gemini-2.5-pro\nCACHE_TTL_HOURS=12\n", encoding="utf-8")
        s = Settings(_env_file=env)
        assert s.llm_model == "gemini-2.5-pro"
        assert s.cache_ttl_hours == 12


def test_load_settings_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    s = load_settings(log_level="DEBUG")
    assert s.log_level == "DEBUG"
