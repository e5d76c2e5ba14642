"""Authentication service: accounts, passwords and login sessions.

Sessions are opaque random tokens stored server side. A session lives
for the configured TTL and is extended (and its cookie re-issued) once
less than half of that lifetime remains.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.crypto import PasswordHasherProtocol
from signflow.application.ports.user_repository import (
    SessionRepositoryProtocol,
    UserRepositoryProtocol,
)
from signflow.application.services.base import LoggingMixin
from signflow.domain.errors import AuthenticationError, ConflictError, ValidationError
from signflow.domain.models.user import Session, User, UserRole

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"
SESSION_TOKEN_BYTES = 32


@dataclass(frozen=True)
class AuthenticatedSession:
    """Result of a sign-in or session validation.

    Attributes:
        user: The authenticated user.
        session: The (possibly extended) session.
        refreshed: True when the cookie must be re-issued.
    """

    user: User
    session: Session
    refreshed: bool = False


class AuthService(LoggingMixin):
    """Sign-up, sign-in, sign-out and session validation."""

    def __init__(
        self,
        users: UserRepositoryProtocol,
        sessions: SessionRepositoryProtocol,
        hasher: PasswordHasherProtocol,
        session_ttl: timedelta = timedelta(days=30),
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._hasher = hasher
        self._session_ttl = session_ttl
        self._init_logger(component="auth")

    @property
    def session_ttl(self) -> timedelta:
        return self._session_ttl

    async def _open_session(self, user_id: UUID) -> Session:
        session = Session(
            id=secrets.token_urlsafe(SESSION_TOKEN_BYTES),
            user_id=user_id,
            expires_at=datetime.now(timezone.utc) + self._session_ttl,
        )
        await self._sessions.create(session)
        return session

    async def sign_up(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthenticatedSession:
        """Create a regular user account and open a session for it.

        Raises:
            ValidationError: If the email is empty or the password too short.
            ConflictError: If the email is already registered.
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required", field="email")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must have at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        if await self._users.get_by_email(email) is not None:
            raise ConflictError("Email already in use")

        user = await self._users.create(
            User(
                id=uuid7(),
                email=email,
                first_name=first_name or None,
                last_name=last_name or None,
                role=UserRole.USER,
                password_hash=self._hasher.hash(password),
            )
        )
        session = await self._open_session(user.id)
        self._log_operation("sign_up", user_id=str(user.id)).info("user_signed_up")
        return AuthenticatedSession(user=user, session=session, refreshed=True)

    async def sign_in(self, email: str, password: str) -> AuthenticatedSession:
        """Check credentials and open a session.

        Raises:
            AuthenticationError: For an unknown email or a wrong password;
                both give the same message.
        """
        log = self._log_operation("sign_in")
        user = await self._users.get_by_email((email or "").strip().lower())
        if (
            user is None
            or not user.password_hash
            or not self._hasher.verify(password or "", user.password_hash)
        ):
            log.info("sign_in_rejected")
            raise AuthenticationError(INVALID_CREDENTIALS)

        session = await self._open_session(user.id)
        log.info("user_signed_in", user_id=str(user.id))
        return AuthenticatedSession(user=user, session=session, refreshed=True)

    async def sign_out(self, session_id: str) -> None:
        await self._sessions.delete(session_id)
        self._log_operation("sign_out").info("user_signed_out")

    async def validate_session(self, session_id: str | None) -> AuthenticatedSession:
        """Resolve a session token to its user, extending it when due.

        Raises:
            AuthenticationError: If the token is missing, unknown or expired,
                or its user no longer exists.
        """
        if not session_id:
            raise AuthenticationError("Not authenticated")
        session = await self._sessions.get(session_id)
        now = datetime.now(timezone.utc)
        if session is None:
            raise AuthenticationError("Invalid session")
        if session.is_expired(now):
            await self._sessions.delete(session_id)
            raise AuthenticationError("Session expired")

        user = await self._users.get(session.user_id)
        if user is None:
            await self._sessions.delete(session_id)
            raise AuthenticationError("Invalid session")

        if session.needs_refresh(now, self._session_ttl):
            expires_at = now + self._session_ttl
            await self._sessions.extend(session.id, expires_at)
            session = Session(id=session.id, user_id=session.user_id, expires_at=expires_at)
            return AuthenticatedSession(user=user, session=session, refreshed=True)
        return AuthenticatedSession(user=user, session=session)
