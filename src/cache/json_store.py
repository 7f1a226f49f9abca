# src/cache/json_store.py — v3
"""JSON file-based cache record store (default CACHE_BACKEND=json).

Stores one JSON file per scope under CACHE_ROOT/<collection>/.
Writers take a per-scope file lock (<scope>.json.lock) so several
processes can share one cache root.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from filelock import FileLock
from pydantic import ValidationError

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.models import CacheRecord

logger = logging.getLogger(__name__)

_LOCK_TIMEOUT_S = 10.0


class JsonCacheStore(BaseCacheStore):
    """File-based cache record store using JSON files."""

    def __init__(
        self,
        cache_root: Path | str,
        collection: str,
        lock_timeout: float = _LOCK_TIMEOUT_S,
    ) -> None:
        self._root = Path(cache_root).expanduser() / collection
        self._root.mkdir(parents=True, exist_ok=True)
        self._collection = collection
        self._lock_timeout = lock_timeout

    async def get(self, scope: str) -> CacheRecord | None:
        """Retrieve the record for a scope."""
        return self._read(self._record_path(scope))

    async def put(self, scope: str, record: CacheRecord) -> None:
        """Store a record, replacing any existing one."""
        path = self._record_path(scope)
        with self._lock(path):
            self._write(path, record)

    async def delete(self, scope: str) -> None:
        """Remove the record for a scope."""
        path = self._record_path(scope)
        with self._lock(path):
            path.unlink(missing_ok=True)

    async def record_usage(
        self, scope: str, used_at: datetime
    ) -> CacheRecord | None:
        """Increment usage_count and refresh last_used_at.

        Read and write happen under the scope lock, so a concurrent delete
        either lands before (None is returned) or after the update.
        """
        path = self._record_path(scope)
        with self._lock(path):
            record = self._read(path)
            if record is None:
                return None
            updated = record.model_copy(
                update={
                    "usage_count": record.usage_count + 1,
                    "last_used_at": used_at,
                }
            )
            self._write(path, updated)
        return updated

    async def list_records(self) -> list[CacheRecord]:
        """List all records in the collection."""
        records: list[CacheRecord] = []
        if not self._root.is_dir():
            return records

        for path in sorted(self._root.glob("*.json")):
            record = self._read(path)
            if record is not None:
                records.append(record)
        return records

    def _lock(self, path: Path) -> FileLock:
        return FileLock(str(path.with_suffix(".json.lock")), timeout=self._lock_timeout)

    def _read(self, path: Path) -> CacheRecord | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheRecord(**data)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to read cache record %s: %s", path.name, e)
            return None

    def _write(self, path: Path, record: CacheRecord) -> None:
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    def _record_path(self, scope: str) -> Path:
        """Return file path for a scope key."""
        safe_key = scope.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
