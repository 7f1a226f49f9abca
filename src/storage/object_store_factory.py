# src/storage/object_store_factory.py — v1
"""Factory: instantiate the reference document object store from configuration."""

from __future__ import annotations

from inspectcache.config.settings import Settings
from inspectcache.storage.base_object_store import BaseObjectStore
from inspectcache.storage.local_object_store import LocalObjectStore


def create_object_store(settings: Settings) -> BaseObjectStore:
    """Create the object store selected by OBJECT_STORE.

    Raises:
        ValueError: If the store type is not supported.
    """
    if settings.object_store == "local":
        return LocalObjectStore(root=settings.object_store_root)

    if settings.object_store == "s3":
        from inspectcache.storage.s3_object_store import S3ObjectStore
        if not settings.object_store_s3_bucket:
            raise ValueError(
                "OBJECT_STORE_S3_BUCKET must be set when OBJECT_STORE=s3"
            )
        return S3ObjectStore(
            bucket=settings.object_store_s3_bucket,
            region=settings.object_store_s3_region or None,
            endpoint_url=settings.object_store_s3_endpoint_url or None,
        )

    raise ValueError(f"Unsupported object store: {settings.object_store!r}")
