"""Structured logging, request log context and secret redaction."""

from signflow.infrastructure.observability.correlation import (
    accept_correlation_id,
    bind_request_user,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    get_request_user_id,
    reset_correlation_id,
    set_correlation_id,
)
from signflow.infrastructure.observability.logging import configure_structlog
from signflow.infrastructure.observability.redaction import (
    redact,
    redact_sensitive_processor,
)

__all__: list[str] = [
    "accept_correlation_id",
    "bind_request_user",
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_request_user_id",
    "redact",
    "redact_sensitive_processor",
    "reset_correlation_id",
    "set_correlation_id",
]
