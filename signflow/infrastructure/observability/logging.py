"""structlog configuration for the SignFlow API.

Production renders one JSON object per line; other environments get a
colored console. A production line looks like::

    {"event": "document_uploaded", "level": "info", "app": "signflow",
     "environment": "production", "timestamp": "...",
     "correlation_id": "...", "user_id": "...", "service": "DocumentService",
     "document_id": "..."}

Secrets are masked by the redaction processor, which runs last before
rendering so it also sees fields bound by the request context.
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from signflow.infrastructure.observability.correlation import correlation_id_processor
from signflow.infrastructure.observability.redaction import redact_sensitive_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

# Third-party loggers that log every HTTP exchange at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _resolve_level() -> int:
    name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _app_fields(environment: str) -> Processor:
    def add_app_fields(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("app", "signflow")
        event_dict.setdefault("environment", environment)
        return event_dict

    return cast(Processor, add_app_fields)


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog once at startup.

    Args:
        environment: "production" for JSON lines, anything else for console.
    """
    level = _resolve_level()
    production = environment == "production"

    logging.basicConfig(level=level, format="%(message)s")
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _app_fields(environment),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
    ]
    if production:
        processors.append(structlog.processors.format_exc_info)
    processors.append(cast(Processor, redact_sensitive_processor))
    processors.append(
        structlog.processors.JSONRenderer()
        if production
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
