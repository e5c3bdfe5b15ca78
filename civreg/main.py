"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

import asyncio
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from civreg.api.v1 import router as v1_router
from civreg.core.config import settings
from civreg.core.errors import AppError, RequestTimeoutError
from civreg.core.logging_config import add_access_log_middleware, configure_logging
from civreg.core.responses import error_response, validation_error_response

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Civil Registry Admin API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_deadline(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests that run past REQUEST_TIMEOUT_SEC with 504 Timeout."""
    try:
        return await asyncio.wait_for(call_next(request), timeout=settings.REQUEST_TIMEOUT_SEC)
    except asyncio.TimeoutError:
        error = RequestTimeoutError("Request timed out")
        logger.warning(
            "%s %s exceeded %ss deadline", request.method, request.url.path, settings.REQUEST_TIMEOUT_SEC
        )
        return error_response(error.status_code, error.message)


# Registered last so it wraps the deadline and sees the 504s.
add_access_log_middleware(app)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):  # type: ignore[no-untyped-def]
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.error)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):  # type: ignore[no-untyped-def]
    return validation_error_response("Validation failed", exc.errors())


@app.exception_handler(PydanticValidationError)
async def model_validation_handler(request: Request, exc: PydanticValidationError):  # type: ignore[no-untyped-def]
    return validation_error_response("Validation failed", exc.errors(include_url=False))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[no-untyped-def]
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[no-untyped-def]
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


app.include_router(v1_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Civil Registry Admin API"}
