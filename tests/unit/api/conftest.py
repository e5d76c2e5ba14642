"""Fixtures for API route tests.

Routes run against the real FastAPI app with every service dependency
overridden by the stub-backed Harness.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from signflow.api.dependencies import (
    get_audit_service,
    get_auth_service,
    get_certificate_service,
    get_dashboard_service,
    get_document_service,
    get_signer_service,
    get_user_admin_service,
)
from signflow.api.main import create_app
from signflow.domain.models.user import Session, User
from tests.helpers import Harness

BASE_URL = "http://test"
SESSION_COOKIE = "signflow_session"

Login = Callable[[User], Awaitable[None]]


@pytest.fixture
def app(harness: Harness) -> FastAPI:
    app = create_app()
    app.dependency_overrides.update(
        {
            get_auth_service: lambda: harness.auth,
            get_user_admin_service: lambda: harness.user_admin,
            get_audit_service: lambda: harness.audit,
            get_certificate_service: lambda: harness.certificate_service,
            get_document_service: lambda: harness.document_service,
            get_signer_service: lambda: harness.signer_service,
            get_dashboard_service: lambda: harness.dashboard,
        }
    )
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Same-origin client; state-changing requests pass the origin check."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url=BASE_URL, headers={"Origin": BASE_URL}
    ) as client:
        yield client


@pytest.fixture
def login(harness: Harness, client: AsyncClient) -> Login:
    """Store the user and a fresh session, and send its cookie."""

    async def _login(user: User) -> None:
        harness.users.add_user(user)
        session = Session(
            id=f"session-{user.id.hex}",
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=30),
        )
        await harness.sessions.create(session)
        client.cookies.set(SESSION_COOKIE, session.id)

    return _login
