"""Unit tests for multipart helpers: bounded upload reads and JSON form fields."""

import asyncio
import io
import unittest

from starlette.datastructures import Headers, UploadFile

from civreg.api.forms import parse_json_field, read_upload
from civreg.core.errors import ValidationError


def upload(data: bytes, size: int | None = None) -> UploadFile:
    return UploadFile(
        io.BytesIO(data),
        size=size,
        filename="scan.PNG",
        headers=Headers({"content-type": "IMAGE/PNG"}),
    )


class TestReadUpload(unittest.TestCase):
    def test_reads_file_within_limit(self) -> None:
        file = asyncio.run(read_upload(upload(b"12345678"), max_bytes=8))
        self.assertEqual(file.data, b"12345678")
        self.assertEqual(file.original_name, "scan.PNG")
        self.assertEqual(file.content_type, "image/png")

    def test_declared_size_over_limit_is_rejected_unread(self) -> None:
        incoming = upload(b"x" * 64, size=64)
        with self.assertRaises(ValidationError) as ctx:
            asyncio.run(read_upload(incoming, max_bytes=8))
        self.assertEqual(ctx.exception.error, {"file": "scan.PNG", "size": 64})
        self.assertEqual(incoming.file.tell(), 0)

    def test_undeclared_size_stops_one_byte_past_limit(self) -> None:
        incoming = upload(b"x" * 64)
        with self.assertRaises(ValidationError) as ctx:
            asyncio.run(read_upload(incoming, max_bytes=8))
        self.assertIn("MB limit", ctx.exception.message)
        self.assertEqual(incoming.file.tell(), 9)


class TestParseJsonField(unittest.TestCase):
    def test_blank_is_none(self) -> None:
        self.assertIsNone(parse_json_field("  ", "details"))
        self.assertIsNone(parse_json_field(None, "details"))

    def test_invalid_json(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            parse_json_field("[not json", "details")
        self.assertIn("details", ctx.exception.error)

    def test_parses_list(self) -> None:
        self.assertEqual(parse_json_field('[{"statement": "a"}]', "details"), [{"statement": "a"}])
