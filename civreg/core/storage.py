"""
Object store for binary attachments, addressed by bucket + key.

The application only records attachment metadata in the database; bytes live
in an S3-compatible store (MinIO in deployment). InMemoryObjectStore backs
local development and tests.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from civreg.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class ObjectStoreError(Exception):
    """The object store rejected or failed an operation."""


class ObjectNotFoundError(ObjectStoreError):
    pass


@dataclass
class StoredObject:
    """An object opened for reading; `body` yields the content in chunks."""

    body: Iterable[bytes]
    content_type: str
    content_length: int | None = None


class ObjectStore(ABC):
    """Get/put/delete-by-key contract used by the resource services."""

    @abstractmethod
    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    def open(self, bucket: str, key: str) -> StoredObject:
        """Open an object for streaming. Raises ObjectNotFoundError if absent."""
        ...

    @abstractmethod
    def delete(self, bucket: str, key: str) -> None:
        """Remove an object. Removing an absent key is not an error."""
        ...


class S3ObjectStore(ObjectStore):
    """boto3 client against MinIO or any S3-compatible endpoint."""

    def __init__(self, settings: Settings) -> None:
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.minio_endpoint_url,
            aws_access_key_id=settings.MINIO_ACCESS_KEY,
            aws_secret_access_key=settings.MINIO_SECRET_KEY.get_secret_value(),
            region_name=settings.MINIO_REGION,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        self._region = settings.MINIO_REGION
        self._known_buckets: set[str] = set()
        self._lock = threading.Lock()

    def _ensure_bucket(self, bucket: str) -> None:
        with self._lock:
            if bucket in self._known_buckets:
                return
            try:
                self._client.head_bucket(Bucket=bucket)
            except ClientError:
                logger.info("Creating bucket %s", bucket)
                if self._region == "us-east-1":
                    self._client.create_bucket(Bucket=bucket)
                else:
                    self._client.create_bucket(
                        Bucket=bucket,
                        CreateBucketConfiguration={"LocationConstraint": self._region},
                    )
            self._known_buckets.add(bucket)

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        try:
            self._ensure_bucket(bucket)
            self._client.put_object(
                Bucket=bucket, Key=key, Body=data, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Failed to store {bucket}/{key}: {e}") from e

    def open(self, bucket: str, key: str) -> StoredObject:
        try:
            resp = self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _MISSING_KEY_CODES:
                raise ObjectNotFoundError(f"{bucket}/{key}") from e
            raise ObjectStoreError(f"Failed to read {bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"Failed to read {bucket}/{key}: {e}") from e
        return StoredObject(
            body=resp["Body"].iter_chunks(),
            content_type=resp.get("ContentType") or "application/octet-stream",
            content_length=resp.get("ContentLength"),
        )

    def delete(self, bucket: str, key: str) -> None:
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Failed to delete {bucket}/{key}: {e}") from e


class InMemoryObjectStore(ObjectStore):
    """Thread-safe dict-backed store for development and tests."""

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        with self._lock:
            self._objects[(bucket, key)] = (data, content_type)

    def open(self, bucket: str, key: str) -> StoredObject:
        with self._lock:
            item = self._objects.get((bucket, key))
        if item is None:
            raise ObjectNotFoundError(f"{bucket}/{key}")
        data, content_type = item
        return StoredObject(body=iter([data]), content_type=content_type, content_length=len(data))

    def delete(self, bucket: str, key: str) -> None:
        with self._lock:
            self._objects.pop((bucket, key), None)

    def exists(self, bucket: str, key: str) -> bool:
        with self._lock:
            return (bucket, key) in self._objects

    def keys(self) -> Iterator[tuple[str, str]]:
        with self._lock:
            return iter(list(self._objects))


@lru_cache
def get_object_store() -> ObjectStore:
    """Dependency: process-wide object store (S3 client, or in-memory under APP_ENV=test)."""
    settings = get_settings()
    if settings.APP_ENV == "test":
        return InMemoryObjectStore()
    return S3ObjectStore(settings)
