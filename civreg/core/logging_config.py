"""Logging setup and the HTTP access-log middleware."""

import logging
from time import perf_counter

from fastapi import FastAPI, Request

from civreg.core.config import Settings

access_logger = logging.getLogger("civreg.access")


def configure_logging(settings: Settings) -> None:
    """Configure root logging once per process (no-op if handlers already exist)."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def add_access_log_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):  # type: ignore[no-untyped-def]
        start = perf_counter()
        response = await call_next(request)
        duration_ms = (perf_counter() - start) * 1000
        client_ip = request.client.host if request.client else "unknown"
        access_logger.info(
            "%s %s | status=%s | client=%s | duration=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            client_ip,
            duration_ms,
        )
        return response
