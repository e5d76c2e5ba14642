"""Request logging with correlation IDs.

Each request gets a correlation ID (the caller's ``X-Correlation-ID`` when
well formed) that is stamped on every log line and echoed in the
response. Health checks and metric scrapes log at debug level only.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from signflow.infrastructure.observability.correlation import (
    accept_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

CORRELATION_HEADER = "X-Correlation-ID"

QUIET_PATHS = frozenset({"/v1/health", "/v1/metrics"})

logger = structlog.get_logger()


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _content_length(request: Request) -> int | None:
    value = request.headers.get("content-length", "")
    return int(value) if value.isdigit() else None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start and outcome; 5xx answers are logged as errors."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = accept_correlation_id(request.headers.get(CORRELATION_HEADER))
        token = set_correlation_id(correlation_id)
        quiet = request.url.path in QUIET_PATHS
        log = logger.bind(
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )
        (log.debug if quiet else log.info)(
            "request_started", content_length=_content_length(request)
        )
        start = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                log.exception(
                    "request_failed",
                    duration_ms=_elapsed_ms(start),
                    error_type=type(exc).__name__,
                )
                raise

            if response.status_code >= 500:
                emit = log.error
            elif quiet:
                emit = log.debug
            else:
                emit = log.info
            emit(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(start),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
