# src/cache/models.py — v2
"""Cache domain models: CacheHandle, CacheRecord, CacheLookupResult."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator


class CacheHandle(BaseModel):
    """Opaque reference to provider-hosted context (e.g. ``cachedContents/abc``).

    Kept distinct from plain strings so it cannot be mistaken for an
    object path or a scope key.
    """

    model_config = ConfigDict(frozen=True)

    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("cache handle name must not be empty")
        return v

    def __str__(self) -> str:
        return self.name


class CacheRecord(BaseModel):
    """Metadata for one materialized context, one record per scope."""

    scope: str
    cache_handle: CacheHandle
    document_ids: list[str]
    fingerprint: str
    character_count: int
    created_at: datetime
    expires_at: datetime
    last_used_at: datetime
    usage_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        """Whether the record may no longer be served at ``now``."""
        return now >= self.expires_at


LookupStatus = Literal["valid", "missing", "expired", "stale"]


class CacheLookupResult(BaseModel):
    """Outcome of checking a scope's record against the current documents."""

    status: LookupStatus = "missing"
    cache_handle: CacheHandle | None = None
    record: CacheRecord | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
