"""Unit tests for the origin check and the domain error mapping."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from signflow.api.errors import GENERIC_ERROR_DETAIL, status_for, to_http_exception
from signflow.api.middleware.origin_check import origin_matches
from signflow.config.settings import reset_settings
from signflow.domain.errors import (
    CertificatePasswordError,
    ConflictError,
    NotFoundError,
    SigningProviderError,
    SigningProviderNotConfiguredError,
    ValidationError,
)
from signflow.domain.exceptions import SignflowError


def make_request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("test", 80),
            "path": "/v1/documents",
            "query_string": b"",
            "headers": [],
        }
    )


class TestOriginCheck:
    @pytest.mark.parametrize(
        ("origin", "host", "expected"),
        [
            ("http://test", "test", True),
            ("https://app.example.com:8443", "APP.example.com:8443", True),
            ("https://evil.example.com", "app.example.com", False),
            (None, "app.example.com", False),
            ("https://app.example.com", None, False),
        ],
    )
    def test_origin_matches(self, origin: str | None, host: str | None, expected: bool) -> None:
        assert origin_matches(origin, host) is expected

    async def test_foreign_origin_is_rejected(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/auth/sign-in",
            json={"email": "a@b.com", "password": "secret1"},
            headers={"Origin": "https://evil.example.com"},
        )

        assert response.status_code == 403
        assert response.json()["type"] == "urn:signflow:auth:origin-mismatch"

    async def test_missing_origin_is_rejected(self, app: FastAPI) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as bare:
            response = await bare.post("/v1/auth/sign-out")

        assert response.status_code == 403

    async def test_safe_methods_skip_the_check(self, app: FastAPI) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as bare:
            response = await bare.get("/v1/health")

        assert response.status_code == 200

    async def test_forwarded_host_is_preferred(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/auth/sign-in",
            json={"email": "a@b.com", "password": "secret1"},
            headers={"Origin": "https://app.example.com", "X-Forwarded-Host": "app.example.com"},
        )

        assert response.status_code == 401


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (SigningProviderNotConfiguredError(), 503),
            (SigningProviderError("boom", status_code=422), 502),
            (CertificatePasswordError(), 400),
            (NotFoundError("document", "x"), 404),
            (ConflictError("taken"), 409),
            (ValidationError("bad"), 400),
            (SignflowError("other"), 500),
        ],
    )
    def test_status_for(self, error: SignflowError, status_code: int) -> None:
        assert status_for(error)[0] == status_code

    def test_problem_body(self) -> None:
        exc = to_http_exception(
            ValidationError("Name is required", field="name"), make_request(), area="documents"
        )

        assert exc.status_code == 400
        assert exc.detail == {
            "type": "urn:signflow:documents:validation",
            "title": "Bad Request",
            "status": 400,
            "detail": "Name is required",
            "instance": "http://test/v1/documents",
            "field": "name",
        }

    def test_status_override(self) -> None:
        exc = to_http_exception(
            CertificatePasswordError(), make_request(), area="certificates", status_code=401
        )

        assert exc.status_code == 401
        assert exc.detail["type"] == "urn:signflow:certificates:certificate-password"

    def test_server_errors_are_generic_in_production(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost/signflow")
        monkeypatch.setenv("CLICKSIGN_ACCESS_TOKEN", "token")
        reset_settings()

        exc = to_http_exception(
            SigningProviderError("upstream said: secret"), make_request(), area="documents"
        )

        assert exc.status_code == 502
        assert exc.detail["detail"] == GENERIC_ERROR_DETAIL
