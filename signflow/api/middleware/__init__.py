"""HTTP middleware: request logging, metrics and origin checks."""

from signflow.api.middleware.logging_middleware import LoggingMiddleware
from signflow.api.middleware.metrics_middleware import MetricsMiddleware
from signflow.api.middleware.origin_check import OriginCheckMiddleware

__all__: list[str] = ["LoggingMiddleware", "MetricsMiddleware", "OriginCheckMiddleware"]
