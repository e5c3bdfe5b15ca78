"""Uniform JSON envelopes: {code, message, data} on success, {code, message, error} on failure."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

STATUS_CODES: dict[int, str] = {
    200: "OK",
    201: "Created",
    400: "BadRequest",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    500: "ServerError",
    504: "Timeout",
}


def status_text(status_code: int) -> str:
    """Fixed string code for an HTTP status (e.g. 404 -> 'NotFound')."""
    return STATUS_CODES.get(status_code, "Unknown")


def success_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "code": status_text(status_code),
            "message": message,
            "data": jsonable_encoder(data if data is not None else []),
        },
    )


def error_response(status_code: int, message: str, error: Any = None) -> JSONResponse:
    content: dict[str, Any] = {"code": status_text(status_code), "message": message}
    if error is not None:
        content["error"] = jsonable_encoder(error)
    return JSONResponse(status_code=status_code, content=content)


def validation_error_response(message: str, errors: Any) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "code": "ValidationError",
            "message": message,
            "errors": jsonable_encoder(errors),
        },
    )
