"""
FastAPI middleware for observability.

Correlation ID binding and one log line per HTTP request. The storyboard
frontend polls batch-status every couple of seconds and fetches every
generated image through the static mount, so those paths log at DEBUG.

Dependencies: fastapi, starlette, storyboard.observability
System role: Request/response observability injection
"""

import logging
import time
from typing import Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from storyboard.observability.correlation import (
    clear_correlation_id,
    set_correlation_id,
)
from storyboard.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

DEFAULT_QUIET_SUFFIXES = ("/batch-status",)
DEFAULT_QUIET_PREFIXES = ("/api/images/",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of each request."""

    def __init__(
        self,
        app: ASGIApp,
        quiet_suffixes: Iterable[str] = DEFAULT_QUIET_SUFFIXES,
        quiet_prefixes: Iterable[str] = DEFAULT_QUIET_PREFIXES,
    ) -> None:
        super().__init__(app)
        self.quiet_suffixes = tuple(quiet_suffixes)
        self.quiet_prefixes = tuple(quiet_prefixes)

    def _level_for(self, path: str) -> int:
        if path.endswith(self.quiet_suffixes) or path.startswith(self.quiet_prefixes):
            return logging.DEBUG
        return logging.INFO

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        path = request.url.path

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{method} {path} - unhandled {type(e).__name__}",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "error_msg": safe_log_value(str(e)),
                },
            )
            raise

        logger.log(
            self._level_for(path),
            f"{method} {path} - {response.status_code}",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "client_host": request.client.host if request.client else None,
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Bind X-Correlation-ID (or a new UUID) for the request and echo it back."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
