# src/storage/local_object_store.py — v1
"""Local filesystem object store (default OBJECT_STORE=local).

Object names are POSIX-style paths relative to the root directory.
Listeners registered with ``subscribe`` receive the same upload/delete
notifications a bucket would emit.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from inspectcache.storage.base_object_store import BaseObjectStore
from inspectcache.storage.models import StoredObject

logger = logging.getLogger(__name__)


class ObjectEventListener(Protocol):
    async def on_object_finalized(self, object_name: str | None) -> object: ...

    async def on_object_deleted(self, object_name: str | None) -> object: ...


class LocalObjectStore(BaseObjectStore):
    """Reference documents stored under a local directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._listeners: list[ObjectEventListener] = []

    def subscribe(self, listener: ObjectEventListener) -> None:
        """Register a listener for upload/delete notifications."""
        self._listeners.append(listener)

    async def list(self, prefix: str) -> list[StoredObject]:
        objects: list[StoredObject] = []
        for path in sorted(self._root.rglob("*")):
            if not path.is_file():
                continue
            name = path.relative_to(self._root).as_posix()
            if not name.startswith(prefix):
                continue
            stat = path.stat()
            objects.append(
                StoredObject(
                    name=name,
                    size=stat.st_size,
                    updated_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return objects

    async def download(self, name: str) -> bytes:
        return self._resolve(name).read_bytes()

    async def upload(self, name: str, content: bytes) -> None:
        path = self._resolve(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.debug("Local upload: %s (%d bytes)", name, len(content))
        for listener in self._listeners:
            await listener.on_object_finalized(name)

    async def delete(self, name: str) -> None:
        path = self._resolve(name)
        if not path.exists():
            return
        path.unlink()
        logger.debug("Local delete: %s", name)
        for listener in self._listeners:
            await listener.on_object_deleted(name)

    def _resolve(self, name: str) -> Path:
        path = (self._root / name).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise ValueError(f"Object name escapes store root: {name!r}")
        return path
