# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: inference
provider, cache record backend, object store and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Longest lifetime the provider accepts for hosted context.
MAX_CACHE_TTL_HOURS = 72


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Inference provider ===
    llm_provider: str = "google"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.2
    llm_max_output_tokens: int = 4096
    google_api_key: str = ""

    # === Context cache records ===
    cache_backend: Literal["json", "sqlite", "redis"] = "json"
    cache_root: Path = Path("~/.inspectcache/cache")
    cache_redis_url: str = ""
    cache_ttl_hours: int = MAX_CACHE_TTL_HOURS

    # === Reference document object store ===
    object_store: Literal["local", "s3"] = "local"
    object_store_root: Path = Path("~/.inspectcache/storage")
    object_store_s3_bucket: str = ""
    object_store_s3_region: str = ""
    object_store_s3_endpoint_url: str = ""

    # === Reference document layout ===
    procedures_prefix: str = "procedures/"
    defect_identifier_scope: str = "defectidentifiertool"
    reference_document_suffix: str = ".pdf"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_ttl_hours")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        """TTL must be positive and within the provider maximum."""
        if v <= 0 or v > MAX_CACHE_TTL_HOURS:
            raise ValueError(
                f"cache_ttl_hours must be in 1..{MAX_CACHE_TTL_HOURS}"
            )
        return v

    @field_validator("procedures_prefix")
    @classmethod
    def validate_procedures_prefix(cls, v: str) -> str:
        """Normalize the folder prefix to end with a single slash."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("procedures_prefix must not be empty")
        return f"{v}/"

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        if self.object_store == "s3" and not self.object_store_s3_bucket:
            errors.append("OBJECT_STORE=s3 requires OBJECT_STORE_S3_BUCKET")

        if self.llm_max_output_tokens <= 0:
            errors.append("LLM_MAX_OUTPUT_TOKENS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
