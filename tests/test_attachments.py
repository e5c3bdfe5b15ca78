"""Unit tests for attachment validation, upload and concurrent deletion (store mocked)."""

import unittest
from unittest.mock import MagicMock

from civreg.core.config import get_settings
from civreg.core.errors import PartialDeleteError, ServerError, ValidationError
from civreg.core.storage import ObjectStore, ObjectStoreError
from civreg.schemas.common import Attachment
from civreg.services.attachments import AttachmentManager, IncomingFile, object_key, validate_file


def png(name: str = "photo.png", data: bytes = b"\x89PNG-bytes") -> IncomingFile:
    return IncomingFile(original_name=name, content_type="image/png", data=data)


def attachment(key: str, bucket: str = "files") -> Attachment:
    return Attachment(
        filename=key,
        original_name=key.rsplit("/", 1)[-1],
        path=f"{bucket}/{key}",
        mime_type="image/png",
        bucket=bucket,
    )


class TestObjectKey(unittest.TestCase):
    def test_folder_timestamp_and_clean_name(self) -> None:
        self.assertEqual(
            object_key("content", "  My Holiday  Photo.PNG ", now_ms=1700000000000),
            "content/1700000000000-my-holiday-photo.png",
        )

    def test_uses_current_time_by_default(self) -> None:
        folder, _, rest = object_key("hero-slider", "a.png").partition("/")
        stamp, _, name = rest.partition("-")
        self.assertEqual(folder, "hero-slider")
        self.assertTrue(stamp.isdigit())
        self.assertEqual(name, "a.png")


class TestValidateFile(unittest.TestCase):
    def test_accepts_each_allowed_type(self) -> None:
        for content_type in ("image/jpeg", "image/png", "image/jpg", "image/webp"):
            with self.subTest(content_type=content_type):
                validate_file(IncomingFile("x", content_type, b"data"), max_bytes=100)

    def test_rejects_other_types(self) -> None:
        with self.assertRaises(ValidationError):
            validate_file(IncomingFile("doc.pdf", "application/pdf", b"data"), max_bytes=100)

    def test_rejects_oversize(self) -> None:
        with self.assertRaises(ValidationError):
            validate_file(png(data=b"x" * 11), max_bytes=10)

    def test_rejects_empty(self) -> None:
        with self.assertRaises(ValidationError):
            validate_file(png(data=b""), max_bytes=10)


class TestUpload(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MagicMock(spec=ObjectStore)
        self.settings = get_settings()
        self.manager = AttachmentManager(self.store, self.settings)

    def test_returns_metadata_for_each_file(self) -> None:
        stored = self.manager.upload("content", [png("a.png"), png("b.png")])
        self.assertEqual(self.store.put.call_count, 2)
        bucket = self.settings.MINIO_BUCKET
        for item, name in zip(stored, ("a.png", "b.png")):
            self.assertTrue(item.filename.startswith("content/"))
            self.assertTrue(item.filename.endswith(f"-{name}"))
            self.assertEqual(item.path, f"{bucket}/{item.filename}")
            self.assertEqual(item.original_name, name)
            self.assertEqual(item.encoding, "7bit")
            self.assertEqual(item.bucket, bucket)

    def test_invalid_file_stops_before_any_write(self) -> None:
        bad = IncomingFile("notes.txt", "text/plain", b"hello")
        with self.assertRaises(ValidationError):
            self.manager.upload("content", [png(), bad])
        self.store.put.assert_not_called()

    def test_failed_put_discards_earlier_objects(self) -> None:
        self.store.put.side_effect = [None, ObjectStoreError("disk full")]
        with self.assertRaises(ServerError):
            self.manager.upload("content", [png("a.png"), png("b.png")])
        self.store.delete.assert_called_once()
        _, key = self.store.delete.call_args.args
        self.assertTrue(key.endswith("-a.png"))


class TestDeleteAll(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MagicMock(spec=ObjectStore)
        self.manager = AttachmentManager(self.store, get_settings())

    def test_deletes_every_object(self) -> None:
        items = [attachment(f"content/{i}.png") for i in range(5)]
        self.manager.delete_all(items)
        deleted = {call.args for call in self.store.delete.call_args_list}
        self.assertEqual(deleted, {("files", item.filename) for item in items})

    def test_nothing_to_delete(self) -> None:
        self.manager.delete_all([])
        self.store.delete.assert_not_called()

    def test_one_failure_fails_the_whole_delete(self) -> None:
        def delete(bucket: str, key: str) -> None:
            if key == "content/b.png":
                raise ObjectStoreError("denied")

        self.store.delete.side_effect = delete
        items = [attachment("content/a.png"), attachment("content/b.png"), attachment("content/c.png")]
        with self.assertRaises(PartialDeleteError) as ctx:
            self.manager.delete_all(items)
        self.assertEqual(ctx.exception.failed_keys, ["files/content/b.png"])
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(self.store.delete.call_count, 3)
