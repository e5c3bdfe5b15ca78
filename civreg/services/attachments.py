"""
Image attachments kept in the object store.

Uploads are validated (MIME type, size) before anything is written. Deleting
an owner's attachments fans out over a thread pool and fails as a whole when
any single object could not be removed.
"""

import logging
import re
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from civreg.core.config import Settings, get_settings
from civreg.core.errors import NotFoundError, PartialDeleteError, ServerError, ValidationError
from civreg.core.storage import ObjectNotFoundError, ObjectStore, ObjectStoreError, StoredObject
from civreg.schemas.common import Attachment

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/jpg", "image/webp"})
DEFAULT_ENCODING = "7bit"
MAX_DELETE_WORKERS = 8

_WHITESPACE = re.compile(r"\s+")


@dataclass
class IncomingFile:
    """An uploaded file read into memory."""

    original_name: str
    content_type: str
    data: bytes


def object_key(folder: str, original_name: str, now_ms: int | None = None) -> str:
    """'{folder}/{epoch_ms}-{name}', with whitespace runs turned into dashes and lowercased."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    clean = _WHITESPACE.sub("-", original_name.strip()).lower()
    return f"{folder}/{stamp}-{clean}"


def oversize_error(original_name: str, size: int, max_bytes: int) -> ValidationError:
    return ValidationError(
        f"File exceeds the {max_bytes // (1024 * 1024)} MB limit",
        error={"file": original_name, "size": size},
    )


def validate_file(file: IncomingFile, max_bytes: int) -> None:
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            f"Unsupported file type: {file.content_type}",
            error={"allowed": sorted(ALLOWED_IMAGE_TYPES), "file": file.original_name},
        )
    if len(file.data) > max_bytes:
        raise oversize_error(file.original_name, len(file.data), max_bytes)
    if not file.data:
        raise ValidationError("File is empty", error={"file": file.original_name})


class AttachmentManager:
    def __init__(self, store: ObjectStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    def upload(self, folder: str, files: list[IncomingFile]) -> list[Attachment]:
        """Store every file or none: already-stored objects are removed if a later put fails."""
        for file in files:
            validate_file(file, self.settings.MAX_UPLOAD_BYTES)

        bucket = self.settings.MINIO_BUCKET
        stored: list[Attachment] = []
        for file in files:
            key = object_key(folder, file.original_name)
            try:
                self.store.put(bucket, key, file.data, file.content_type)
            except ObjectStoreError as e:
                logger.error("Upload of %s failed: %s", key, e)
                self.discard(stored)
                raise ServerError("Failed to upload file", error=str(e)) from e
            stored.append(
                Attachment(
                    filename=key,
                    original_name=file.original_name,
                    path=f"{bucket}/{key}",
                    mime_type=file.content_type,
                    encoding=DEFAULT_ENCODING,
                    bucket=bucket,
                )
            )
        logger.info("Stored %s attachment(s) under %s", len(stored), folder)
        return stored

    def open(self, attachment: Attachment) -> StoredObject:
        try:
            return self.store.open(attachment.bucket, attachment.filename)
        except ObjectNotFoundError as e:
            raise NotFoundError("File not found") from e
        except ObjectStoreError as e:
            logger.error("Failed to read %s/%s: %s", attachment.bucket, attachment.filename, e)
            raise ServerError("Failed to read file", error=str(e)) from e

    def _delete_one(self, attachment: Attachment) -> str | None:
        try:
            self.store.delete(attachment.bucket, attachment.filename)
        except ObjectStoreError as e:
            logger.warning("Failed to delete %s/%s: %s", attachment.bucket, attachment.filename, e)
            return f"{attachment.bucket}/{attachment.filename}"
        return None

    def delete_all(self, attachments: Iterable[Attachment]) -> None:
        """Delete concurrently; raise PartialDeleteError naming every key that failed."""
        items = list(attachments)
        if not items:
            return
        workers = min(MAX_DELETE_WORKERS, len(items))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._delete_one, items))
        failed = [key for key in results if key is not None]
        if failed:
            raise PartialDeleteError(
                "Failed to delete attachments; the record was kept",
                failed_keys=failed,
                error={"failedKeys": failed},
            )

    def discard(self, attachments: Iterable[Attachment]) -> None:
        """Best-effort removal of objects whose owning record was never written."""
        for attachment in attachments:
            if self._delete_one(attachment) is not None:
                logger.error("Orphaned attachment %s/%s", attachment.bucket, attachment.filename)
