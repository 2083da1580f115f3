"""
Unit tests for observability features.

Tests cover:
- Request correlation ID generation and context
- Structured JSON log formatting
- Prometheus metrics on a private registry
- Request tracking middleware
"""

import json
import logging
import re
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from dmn_rules.core.observability import (
    Metrics,
    ObservabilityMiddleware,
    StructuredFormatter,
    configure_structured_logging,
    generate_request_id,
    get_request_id,
    metrics,
    metrics_endpoint,
    set_correlation_id,
)


class TestRequestIdGeneration:
    """Tests for request ID generation and context management."""

    @pytest.mark.anyio
    async def test_generate_request_id_returns_uuid_format(self):
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
        )
        assert uuid_pattern.match(generate_request_id())

    @pytest.mark.anyio
    async def test_request_ids_are_unique(self):
        assert generate_request_id() != generate_request_id()

    @pytest.mark.anyio
    async def test_set_and_get(self):
        set_correlation_id("request-1")
        assert get_request_id() == "request-1"
        set_correlation_id("")


class TestStructuredFormatter:
    """Tests for JSON log output."""

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            name="dmn_rules.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Generated %s",
            args=("decision_1",),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    @pytest.mark.anyio
    async def test_standard_fields(self):
        entry = json.loads(StructuredFormatter().format(self._record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "dmn_rules.test"
        assert entry["message"] == "Generated decision_1"
        assert entry["line"] == 10
        assert "timestamp" in entry

    @pytest.mark.anyio
    async def test_extra_fields(self):
        entry = json.loads(StructuredFormatter().format(self._record(source="rules", rows=3)))
        assert entry["extra"]["source"] == "rules"
        assert entry["extra"]["rows"] == 3

    @pytest.mark.anyio
    async def test_request_id_included(self):
        set_correlation_id("req-42")
        try:
            entry = json.loads(StructuredFormatter().format(self._record()))
        finally:
            set_correlation_id("")
        assert entry["request_id"] == "req-42"

    @pytest.mark.anyio
    async def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"] == {"type": "ValueError", "message": "boom"}

    @pytest.mark.anyio
    async def test_configure_structured_logging(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            configure_structured_logging("debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestMetrics:
    """Tests for Prometheus metrics."""

    @pytest.mark.anyio
    async def test_private_registry(self):
        registry = CollectorRegistry()
        private = Metrics(registry)
        private.dmn_generations_total.labels(status="success", source="rules").inc()
        assert (
            registry.get_sample_value(
                "dmn_generations_total", {"status": "success", "source": "rules"}
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_metrics_endpoint_content(self):
        response = metrics_endpoint()
        assert response.media_type.startswith("text/plain")
        assert b"dmn_generation_duration_seconds" in response.body


class TestObservabilityMiddleware:
    """Tests for request tracking."""

    def _app(self, registry_metrics: Metrics) -> FastAPI:
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, metrics_instance=registry_metrics)

        @app.get("/ping")
        def ping():
            return {"pong": True}

        @app.get("/boom")
        def boom():
            raise RuntimeError("boom")

        return app

    @pytest.mark.anyio
    async def test_request_counted(self):
        registry = CollectorRegistry()
        client = TestClient(self._app(Metrics(registry)))
        response = client.get("/ping")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]
        assert (
            registry.get_sample_value(
                "http_requests_total", {"method": "GET", "route": "/ping", "status_code": "200"}
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_error_counted(self):
        registry = CollectorRegistry()
        client = TestClient(self._app(Metrics(registry)), raise_server_exceptions=False)
        response = client.get("/boom")
        assert response.status_code == 500
        assert (
            registry.get_sample_value(
                "http_errors_total",
                {"error_type": "RuntimeError", "method": "GET", "route": "/boom"},
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_global_metrics_default(self):
        middleware = ObservabilityMiddleware(FastAPI())
        assert middleware.metrics is metrics
        assert "/metrics" in middleware.skip_paths
