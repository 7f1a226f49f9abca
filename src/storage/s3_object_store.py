# src/storage/s3_object_store.py — v2
"""S3-compatible object store (OBJECT_STORE=s3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install boto3.
Upload/delete notifications arrive as S3 event notifications and are
dispatched by InvalidationTrigger.handle_s3_event.
"""

from __future__ import annotations

import logging

from inspectcache.storage.base_object_store import BaseObjectStore
from inspectcache.storage.models import StoredObject

logger = logging.getLogger(__name__)


class S3ObjectStore(BaseObjectStore):
    """Reference documents stored in an S3-compatible bucket."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize S3 object store.

        Args:
            bucket: S3 bucket name.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 object store: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket

    async def list(self, prefix: str) -> list[StoredObject]:
        """List objects under a prefix, following pagination."""
        paginator = self._s3.get_paginator("list_objects_v2")
        objects: list[StoredObject] = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                objects.append(
                    StoredObject(
                        name=obj["Key"],
                        size=obj.get("Size"),
                        updated_at=obj.get("LastModified"),
                    )
                )
        return objects

    async def download(self, name: str) -> bytes:
        response = self._s3.get_object(Bucket=self._bucket, Key=name)
        return response["Body"].read()

    async def upload(self, name: str, content: bytes) -> None:
        self._s3.put_object(Bucket=self._bucket, Key=name, Body=content)
        logger.debug("S3 upload: s3://%s/%s (%d bytes)", self._bucket, name, len(content))

    async def delete(self, name: str) -> None:
        self._s3.delete_object(Bucket=self._bucket, Key=name)
        logger.debug("S3 delete: s3://%s/%s", self._bucket, name)
