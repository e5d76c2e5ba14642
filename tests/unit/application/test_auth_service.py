"""Unit tests for AuthService sign-up, sign-in and session handling."""

from datetime import datetime, timedelta, timezone

import pytest
from uuid6 import uuid7

from signflow.domain.errors import AuthenticationError, ConflictError, ValidationError
from signflow.domain.models.user import Session, UserRole
from tests.helpers import Harness


class TestSignUp:
    async def test_creates_user_and_session(self, harness: Harness) -> None:
        result = await harness.auth.sign_up(" Maria@Example.com ", "secret1", "Maria", "Silva")

        assert result.user.email == "maria@example.com"
        assert result.user.role == UserRole.USER
        assert result.user.password_hash != "secret1"
        assert await harness.sessions.get(result.session.id) is not None
        assert result.refreshed is True

    async def test_rejects_short_password(self, harness: Harness) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await harness.auth.sign_up("a@b.com", "12345")
        assert exc_info.value.field == "password"

    async def test_rejects_empty_email(self, harness: Harness) -> None:
        with pytest.raises(ValidationError):
            await harness.auth.sign_up("  ", "secret1")

    async def test_rejects_duplicate_email(self, harness: Harness) -> None:
        await harness.auth.sign_up("a@b.com", "secret1")
        with pytest.raises(ConflictError, match="Email already in use"):
            await harness.auth.sign_up("A@B.com", "secret2")


class TestSignIn:
    async def test_valid_credentials(self, harness: Harness) -> None:
        await harness.auth.sign_up("a@b.com", "secret1")

        result = await harness.auth.sign_in("A@B.COM", "secret1")

        assert result.user.email == "a@b.com"

    @pytest.mark.parametrize(("email", "password"), [("a@b.com", "wrong"), ("x@b.com", "secret1")])
    async def test_same_error_for_bad_email_or_password(
        self, harness: Harness, email: str, password: str
    ) -> None:
        await harness.auth.sign_up("a@b.com", "secret1")

        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await harness.auth.sign_in(email, password)

    async def test_sign_out_removes_session(self, harness: Harness) -> None:
        result = await harness.auth.sign_up("a@b.com", "secret1")

        await harness.auth.sign_out(result.session.id)

        with pytest.raises(AuthenticationError):
            await harness.auth.validate_session(result.session.id)


class TestValidateSession:
    async def test_fresh_session_is_not_refreshed(self, harness: Harness) -> None:
        created = await harness.auth.sign_up("a@b.com", "secret1")

        result = await harness.auth.validate_session(created.session.id)

        assert result.user.id == created.user.id
        assert result.refreshed is False

    async def test_session_past_half_life_is_extended(self, harness: Harness) -> None:
        created = await harness.auth.sign_up("a@b.com", "secret1")
        old_expiry = datetime.now(timezone.utc) + timedelta(days=5)
        await harness.sessions.extend(created.session.id, old_expiry)

        result = await harness.auth.validate_session(created.session.id)

        assert result.refreshed is True
        assert result.session.expires_at > old_expiry + timedelta(days=20)
        stored = await harness.sessions.get(created.session.id)
        assert stored is not None and stored.expires_at == result.session.expires_at

    async def test_expired_session_is_deleted(self, harness: Harness) -> None:
        created = await harness.auth.sign_up("a@b.com", "secret1")
        await harness.sessions.extend(
            created.session.id, datetime.now(timezone.utc) - timedelta(seconds=1)
        )

        with pytest.raises(AuthenticationError, match="Session expired"):
            await harness.auth.validate_session(created.session.id)
        assert await harness.sessions.get(created.session.id) is None

    @pytest.mark.parametrize("token", [None, "", "unknown"])
    async def test_missing_or_unknown(self, harness: Harness, token: str | None) -> None:
        with pytest.raises(AuthenticationError):
            await harness.auth.validate_session(token)

    async def test_session_of_deleted_user(self, harness: Harness) -> None:
        created = await harness.auth.sign_up("a@b.com", "secret1")
        await harness.users.delete(created.user.id)

        with pytest.raises(AuthenticationError):
            await harness.auth.validate_session(created.session.id)

    def test_needs_refresh_boundary(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        ttl = timedelta(days=30)
        session = Session(id="s", user_id=uuid7(), expires_at=now + timedelta(days=16))
        assert session.needs_refresh(now, ttl) is False
        assert session.needs_refresh(now + timedelta(days=2), ttl) is True
