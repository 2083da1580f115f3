"""
Unit tests for application wiring.

Tests cover:
- Domain error, HTTP exception and catch-all handlers
- Token-protected metrics endpoint
- Request ID propagation through the observability middleware
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from dmn_rules.core.config import settings
from dmn_rules.core.errors import ExpressionError, GenerationError, ValidationError
from dmn_rules.main import create_app


class TestExceptionHandlers:
    @pytest.mark.anyio
    async def test_validation_error_handler(self):
        app = create_app()
        client = TestClient(app)

        @app.get("/test-validation")
        def raise_validation():
            raise ValidationError("Bad expression", details={"errors": ["x"]})

        response = client.get("/test-validation")
        assert response.status_code == 400
        assert response.json() == {
            "error": "ValidationError",
            "message": "Bad expression",
            "details": {"errors": ["x"]},
        }

    @pytest.mark.anyio
    async def test_expression_error_handler(self):
        app = create_app()
        client = TestClient(app)

        @app.get("/test-expression")
        def raise_expression():
            raise ExpressionError("First expression should not have a logical operator")

        response = client.get("/test-expression")
        assert response.status_code == 400
        assert response.json()["error"] == "ExpressionError"

    @pytest.mark.anyio
    async def test_generation_error_handler(self):
        app = create_app()
        client = TestClient(app)

        @app.get("/test-generation")
        def raise_generation():
            raise GenerationError("Cell text is not valid XML", details={"reason": "NUL"})

        response = client.get("/test-generation")
        assert response.status_code == 422
        assert response.json()["details"] == {"reason": "NUL"}

    @pytest.mark.anyio
    async def test_http_exception_handler(self):
        app = create_app()
        client = TestClient(app)

        @app.get("/test-http")
        def raise_http():
            raise HTTPException(status_code=409, detail="Conflict")

        response = client.get("/test-http")
        assert response.status_code == 409
        assert response.json() == {"error": "HTTPException", "message": "Conflict", "details": {}}

    @pytest.mark.anyio
    async def test_unhandled_exception_handler(self):
        app = create_app()
        client = TestClient(app, raise_server_exceptions=False)

        @app.get("/test-crash")
        def crash():
            raise RuntimeError("internal detail")

        response = client.get("/test-crash")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "InternalServerError"
        assert "internal detail" not in body["message"]


class TestMetricsEndpoint:
    @pytest.mark.anyio
    async def test_token_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "metrics_token", None)
        response = TestClient(create_app()).get("/metrics")
        assert response.status_code == 500

    @pytest.mark.anyio
    async def test_wrong_token(self, monkeypatch):
        monkeypatch.setattr(settings, "metrics_token", "a-very-long-metrics-token")
        response = TestClient(create_app()).get("/metrics", headers={"X-Metrics-Token": "nope"})
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid metrics token"

    @pytest.mark.anyio
    async def test_valid_token(self, monkeypatch):
        monkeypatch.setattr(settings, "metrics_token", "a-very-long-metrics-token")
        client = TestClient(create_app())
        client.get("/api/v1/health")
        response = client.get(
            "/metrics", headers={"X-Metrics-Token": "a-very-long-metrics-token"}
        )
        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "dmn_generations_total" in response.text


class TestRequestId:
    @pytest.mark.anyio
    async def test_generated_when_missing(self, client):
        response = client.get("/api/v1/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.anyio
    async def test_echoed_when_supplied(self, client):
        response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
