"""Unit tests for the Prometheus metrics collector."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from signflow.infrastructure.monitoring.metrics import (
    MetricsCollector,
    generate_metrics,
    get_metrics_collector,
    reset_metrics_collector,
)

LABELS = {"service": "signflow-api", "environment": "development"}


@pytest.fixture
def collector() -> MetricsCollector:
    return MetricsCollector(registry=CollectorRegistry())


class TestHttpRequests:
    def test_success_is_counted_but_not_failed(self, collector: MetricsCollector) -> None:
        collector.record_request("GET", "/v1/documents", 200, 0.02)
        collector.record_request("GET", "/v1/documents", 200, 0.03)

        registry = collector.registry
        assert registry.get_sample_value(
            "http_requests_total",
            {**LABELS, "method": "GET", "endpoint": "/v1/documents", "status": "200"},
        ) == 2.0
        assert registry.get_sample_value(
            "http_request_duration_seconds_count",
            {**LABELS, "method": "GET", "endpoint": "/v1/documents"},
        ) == 2.0
        assert registry.get_sample_value(
            "http_requests_failed_total",
            {
                **LABELS,
                "method": "GET",
                "endpoint": "/v1/documents",
                "status": "200",
                "error_type": "http_error",
            },
        ) is None

    def test_failure_carries_error_type(self, collector: MetricsCollector) -> None:
        collector.record_request("POST", "/v1/certificates", 400, 0.1, "bad_request")
        collector.record_request("POST", "/v1/certificates", 502, 0.1)

        registry = collector.registry
        base = {**LABELS, "method": "POST", "endpoint": "/v1/certificates"}
        assert registry.get_sample_value(
            "http_requests_failed_total",
            {**base, "status": "400", "error_type": "bad_request"},
        ) == 1.0
        assert registry.get_sample_value(
            "http_requests_failed_total",
            {**base, "status": "502", "error_type": "http_error"},
        ) == 1.0


class TestProviderAndWorkflow:
    def test_provider_outcomes_and_duration(self, collector: MetricsCollector) -> None:
        collector.record_provider_request("create_envelope", "success", 0.4)
        collector.record_provider_request("create_envelope", "timeout")

        registry = collector.registry
        for outcome in ("success", "timeout"):
            assert registry.get_sample_value(
                "provider_requests_total",
                {**LABELS, "operation": "create_envelope", "outcome": outcome},
            ) == 1.0
        assert registry.get_sample_value(
            "provider_request_duration_seconds_count",
            {**LABELS, "operation": "create_envelope"},
        ) == 1.0

    def test_unknown_provider_outcome_rejected(self, collector: MetricsCollector) -> None:
        with pytest.raises(ValueError, match="Unknown provider outcome"):
            collector.record_provider_request("create_envelope", "error")

    def test_workflow_events(self, collector: MetricsCollector) -> None:
        collector.record_workflow_event("document_uploaded")

        assert collector.registry.get_sample_value(
            "workflow_events_total", {**LABELS, "event": "document_uploaded"}
        ) == 1.0


class TestStartup:
    def test_startup_and_uptime(self, collector: MetricsCollector) -> None:
        assert collector.uptime("api") == 0.0

        collector.record_startup("api")
        collector.refresh_uptime()

        labels = {"service": "api", "environment": "development"}
        assert collector.registry.get_sample_value("service_starts_total", labels) == 1.0
        assert collector.registry.get_sample_value("uptime_seconds", labels) is not None
        assert collector.uptime("api") >= 0.0


class TestMetricsSingleton:
    def test_singleton_and_reset(self) -> None:
        first = get_metrics_collector()
        assert get_metrics_collector() is first

        reset_metrics_collector()
        assert get_metrics_collector() is not first

    def test_generate_metrics_exposition(self) -> None:
        get_metrics_collector().record_workflow_event("signature_failed")

        output = generate_metrics().decode()

        assert "workflow_events_total" in output
        assert 'event="signature_failed"' in output
