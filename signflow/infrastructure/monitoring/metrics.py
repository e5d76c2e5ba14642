"""Prometheus metrics for the SignFlow API.

HTTP traffic is recorded by ``MetricsMiddleware``, every Clicksign call by
``ClicksignClient`` and document milestones (uploaded, sent, signed) by
``DocumentService``. All families share ``service`` and ``environment``
labels.
"""

import os
import threading
import time
from typing import TypeVar

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Provider round trips with a 10 MB PDF can take several seconds
HTTP_DURATION_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
PROVIDER_DURATION_BUCKETS = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

PROVIDER_OUTCOMES = frozenset({"success", "rejected", "timeout", "connection_error"})

_BASE_LABELS = ("service", "environment")

_MetricT = TypeVar("_MetricT", Counter, Gauge, Histogram)


class MetricsCollector:
    """Owns the metric families and the registry they are exported from.

    Pass a fresh ``CollectorRegistry`` in tests so counters start at zero.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._service = os.environ.get("SERVICE_NAME", "signflow-api")
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._started_at: dict[str, float] = {}

        self.uptime_seconds = self._family(
            Gauge, "uptime_seconds", "Seconds since the process started"
        )
        self.service_starts_total = self._family(
            Counter, "service_starts_total", "Process starts"
        )
        self.http_request_duration_seconds = self._family(
            Histogram,
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            "method",
            "endpoint",
            buckets=HTTP_DURATION_BUCKETS,
        )
        self.http_requests_total = self._family(
            Counter, "http_requests_total", "HTTP requests", "method", "endpoint", "status"
        )
        self.http_requests_failed_total = self._family(
            Counter,
            "http_requests_failed_total",
            "HTTP requests answered with 4xx or 5xx",
            "method",
            "endpoint",
            "status",
            "error_type",
        )
        self.provider_requests_total = self._family(
            Counter,
            "provider_requests_total",
            "Calls to the signing provider by outcome",
            "operation",
            "outcome",
        )
        self.provider_request_duration_seconds = self._family(
            Histogram,
            "provider_request_duration_seconds",
            "Signing provider call duration in seconds",
            "operation",
            buckets=PROVIDER_DURATION_BUCKETS,
        )
        self.workflow_events_total = self._family(
            Counter,
            "workflow_events_total",
            "Document workflow milestones (document_uploaded, document_signed, ...)",
            "event",
        )

    def _family(
        self,
        kind: type[_MetricT],
        name: str,
        documentation: str,
        *labels: str,
        **options: object,
    ) -> _MetricT:
        return kind(
            name=name,
            documentation=documentation,
            labelnames=[*_BASE_LABELS, *labels],
            registry=self._registry,
            **options,
        )

    def _base(self) -> dict[str, str]:
        return {"service": self._service, "environment": self._environment}

    def record_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        duration: float,
        error_type: str | None = None,
    ) -> None:
        """Record one HTTP request.

        Args:
            method: HTTP method.
            endpoint: Route template, e.g. ``/v1/documents/{document_id}``.
            status_code: Response status.
            duration: Seconds spent handling the request.
            error_type: Label for 4xx/5xx responses; ignored otherwise.
        """
        base = self._base()
        status = str(status_code)
        self.http_request_duration_seconds.labels(
            **base, method=method, endpoint=endpoint
        ).observe(duration)
        self.http_requests_total.labels(
            **base, method=method, endpoint=endpoint, status=status
        ).inc()
        if status_code >= 400:
            self.http_requests_failed_total.labels(
                **base,
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=error_type or "http_error",
            ).inc()

    def record_provider_request(
        self, operation: str, outcome: str, duration: float | None = None
    ) -> None:
        """Record a Clicksign call; ``outcome`` is one of PROVIDER_OUTCOMES."""
        if outcome not in PROVIDER_OUTCOMES:
            raise ValueError(f"Unknown provider outcome: {outcome}")
        base = self._base()
        self.provider_requests_total.labels(
            **base, operation=operation, outcome=outcome
        ).inc()
        if duration is not None:
            self.provider_request_duration_seconds.labels(
                **base, operation=operation
            ).observe(duration)

    def record_workflow_event(self, event: str) -> None:
        self.workflow_events_total.labels(**self._base(), event=event).inc()

    def record_startup(self, service: str) -> None:
        self._started_at[service] = time.time()
        self.service_starts_total.labels(
            service=service, environment=self._environment
        ).inc()

    def uptime(self, service: str) -> float:
        """Seconds since ``service`` last started, 0.0 if it never did."""
        started = self._started_at.get(service)
        return 0.0 if started is None else time.time() - started

    def refresh_uptime(self) -> None:
        for service in self._started_at:
            self.uptime_seconds.labels(
                service=service, environment=self._environment
            ).set(self.uptime(service))

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


_metrics_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector, created on first use."""
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Exposition-format snapshot with uptime gauges brought up to date."""
    collector = get_metrics_collector()
    collector.refresh_uptime()
    return generate_latest(collector.registry)


def reset_metrics_collector() -> None:
    """Drop the collector (tests)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
