"""Helpers for multipart form endpoints."""

import json
from typing import Any, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from civreg.core.config import get_settings
from civreg.core.errors import ValidationError
from civreg.services.attachments import IncomingFile, oversize_error

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_model(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate form data the way JSON bodies are validated."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


def parse_json_field(raw: Any, name: str) -> Any:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"{name} must be a JSON string", error={name: "not a string"})
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"{name} must be valid JSON", error={name: str(e)}) from e


def is_upload(value: Any) -> bool:
    return isinstance(value, UploadFile)


async def read_upload(upload: UploadFile, max_bytes: int | None = None) -> IncomingFile:
    """Read an upload into memory, never holding more than `max_bytes + 1` bytes of it."""
    limit = max_bytes if max_bytes is not None else get_settings().MAX_UPLOAD_BYTES
    name = upload.filename or "file"
    if upload.size is not None and upload.size > limit:
        raise oversize_error(name, upload.size, limit)
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise oversize_error(name, len(data), limit)
    return IncomingFile(
        original_name=name,
        content_type=(upload.content_type or "application/octet-stream").lower(),
        data=data,
    )
