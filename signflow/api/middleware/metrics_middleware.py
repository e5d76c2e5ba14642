"""Metrics middleware for request instrumentation.

Records HTTP request duration, totals and failures to Prometheus.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from signflow.infrastructure.monitoring.metrics import get_metrics_collector

_CLIENT_ERROR_TYPES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    422: "unprocessable_entity",
    429: "rate_limited",
}
_SERVER_ERROR_TYPES = {
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
    504: "gateway_timeout",
}


def classify_error_type(status_code: int) -> str:
    """Classify an HTTP error status code into an error type label."""
    if 400 <= status_code < 500:
        return _CLIENT_ERROR_TYPES.get(status_code, "client_error")
    if status_code >= 500:
        return _SERVER_ERROR_TYPES.get(status_code, "server_error")
    return "unknown"


def _endpoint_label(request: Request) -> str:
    # Route templates keep label cardinality bounded (no ids in paths)
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to record HTTP request metrics.

    Labels: service, environment, method, endpoint (route template),
    status and, for 4xx/5xx, error_type.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        status_code = response.status_code
        get_metrics_collector().record_request(
            method=request.method,
            endpoint=_endpoint_label(request),
            status_code=status_code,
            duration=time.perf_counter() - start_time,
            error_type=classify_error_type(status_code) if status_code >= 400 else None,
        )
        return response
