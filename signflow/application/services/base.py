"""Logging mixin shared by the application services.

A service calls ``self._init_logger(component="documents")`` in its
constructor and then, per operation::

    log = self._log_operation("upload", document_name=name)
    log.info("document_uploaded", page_count=pages)
"""

import structlog

from signflow.infrastructure.observability.correlation import (
    get_correlation_id,
    get_request_user_id,
)


class LoggingMixin:
    """Gives a service a logger bound to its class name and component."""

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "application") -> None:
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Logger for one operation.

        The correlation ID and the acting user are bound eagerly so they
        survive when the logger is handed to a background task.
        """
        bound: dict[str, object] = {"operation": operation}
        correlation_id = get_correlation_id()
        if correlation_id:
            bound["correlation_id"] = correlation_id
        user_id = get_request_user_id()
        if user_id and "user_id" not in context:
            bound["user_id"] = user_id
        return self._log.bind(**bound, **context)
