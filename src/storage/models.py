# src/storage/models.py — v2
"""Storage domain models: StoredObject."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class StoredObject(BaseModel):
    """Descriptor of one object in the reference document store."""

    name: str
    size: int | None = None
    updated_at: datetime | None = None
