"""Cross-site request protection for cookie-authenticated requests.

State-changing requests must carry an ``Origin`` header whose host
matches ``X-Forwarded-Host`` (when behind a proxy) or ``Host``.
"""

from collections.abc import Awaitable, Callable
from urllib.parse import urlsplit

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def origin_matches(origin: str | None, host: str | None) -> bool:
    """Whether ``origin``'s host (with port) equals ``host``."""
    if not origin or not host:
        return False
    return urlsplit(origin).netloc.lower() == host.strip().lower()


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """Reject state-changing requests from foreign origins with 403."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        origin = request.headers.get("origin")
        host = request.headers.get("x-forwarded-host") or request.headers.get("host")
        if not origin_matches(origin, host):
            structlog.get_logger().warning(
                "origin_check_failed",
                method=request.method,
                path=request.url.path,
                origin=origin,
                host=host,
            )
            return JSONResponse(
                status_code=403,
                content={
                    "type": "urn:signflow:auth:origin-mismatch",
                    "title": "Forbidden",
                    "status": 403,
                    "detail": "Request origin does not match the host",
                    "instance": str(request.url),
                },
            )
        return await call_next(request)
