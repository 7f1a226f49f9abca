# src/cache/sqlite_store.py — v2
"""SQLite-based cache record store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. Each collection is a row
namespace inside a single table; usage accounting is a single UPDATE.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.models import CacheRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_records (
    collection TEXT NOT NULL,
    scope TEXT NOT NULL,
    data TEXT NOT NULL,
    usage_count INTEGER NOT NULL DEFAULT 0,
    last_used_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    PRIMARY KEY (collection, scope)
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache record store."""

    def __init__(self, db_path: Path | str, collection: str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._collection = collection
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, scope: str) -> CacheRecord | None:
        """Retrieve the record for a scope."""
        cursor = self._conn.execute(
            """SELECT data, usage_count, last_used_at FROM cache_records
               WHERE collection = ? AND scope = ?""",
            (self._collection, scope),
        )
        return self._row_to_record(cursor.fetchone())

    async def put(self, scope: str, record: CacheRecord) -> None:
        """Store a record (upsert)."""
        self._conn.execute(
            """INSERT OR REPLACE INTO cache_records
               (collection, scope, data, usage_count, last_used_at, expires_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                self._collection,
                scope,
                record.model_dump_json(),
                record.usage_count,
                record.last_used_at.isoformat(),
                record.expires_at.isoformat(),
            ),
        )
        self._conn.commit()

    async def delete(self, scope: str) -> None:
        """Remove the record for a scope."""
        self._conn.execute(
            "DELETE FROM cache_records WHERE collection = ? AND scope = ?",
            (self._collection, scope),
        )
        self._conn.commit()

    async def record_usage(
        self, scope: str, used_at: datetime
    ) -> CacheRecord | None:
        """Increment usage_count and refresh last_used_at in one statement."""
        cursor = self._conn.execute(
            """UPDATE cache_records
               SET usage_count = usage_count + 1, last_used_at = ?
               WHERE collection = ? AND scope = ?""",
            (used_at.isoformat(), self._collection, scope),
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            return None
        return await self.get(scope)

    async def list_records(self) -> list[CacheRecord]:
        """List all records in the collection."""
        cursor = self._conn.execute(
            """SELECT data, usage_count, last_used_at FROM cache_records
               WHERE collection = ? ORDER BY scope""",
            (self._collection,),
        )
        records: list[CacheRecord] = []
        for row in cursor.fetchall():
            record = self._row_to_record(row)
            if record is not None:
                records.append(record)
        return records

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _row_to_record(self, row: tuple | None) -> CacheRecord | None:
        if row is None:
            return None
        data, usage_count, last_used_at = row
        try:
            payload = json.loads(data)
            # Usage columns are authoritative; the JSON blob holds creation state.
            payload["usage_count"] = usage_count
            payload["last_used_at"] = last_used_at
            return CacheRecord(**payload)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to deserialize cache record: %s", e)
            return None
