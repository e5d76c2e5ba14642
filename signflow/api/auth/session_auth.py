"""Session cookie authentication.

``get_current_user`` resolves the session cookie into a user. When the
session was extended the cookie is re-issued on the response; when it
is missing, unknown or expired the request fails with 401 and the
cookie is blanked.
"""

from typing import Annotated, TypeVar

import structlog
from fastapi import Depends, HTTPException, Request, Response, status

from signflow.api.dependencies.services import get_auth_service
from signflow.application.services.auth_service import AuthService
from signflow.config.settings import get_settings
from signflow.domain.errors import AuthenticationError
from signflow.domain.models.user import Session, User
from signflow.infrastructure.observability.correlation import bind_request_user

logger = structlog.get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=Response)


def set_session_cookie(response: Response, session: Session, max_age: int) -> None:
    """Issue the HTTP-only session cookie."""
    config = get_settings().session
    response.set_cookie(
        key=config.cookie_name,
        value=session.id,
        max_age=max_age,
        expires=session.expires_at,
        path="/",
        httponly=True,
        secure=config.secure_cookie,
        samesite="lax",
    )


def blank_session_cookie(response: Response) -> None:
    """Replace the session cookie with an empty, already expired one."""
    config = get_settings().session
    response.set_cookie(
        key=config.cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=config.secure_cookie,
        samesite="lax",
    )


def carry_cookies(source: Response, target: ResponseT) -> ResponseT:
    """Copy the cookies set on ``source`` onto ``target``.

    FastAPI drops the headers of the injected response when a route returns
    a response object of its own, so such routes hand theirs through here
    to keep a refreshed session cookie.
    """
    for key, value in source.raw_headers:
        if key == b"set-cookie":
            target.headers.append("set-cookie", value.decode("latin-1"))
    return target


def _blank_cookie_headers() -> dict[str, str]:
    carrier = Response()
    blank_session_cookie(carrier)
    return {"set-cookie": carrier.headers["set-cookie"]}


async def get_current_user(
    request: Request,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Resolve the authenticated user from the session cookie.

    Raises:
        HTTPException 401: If the session is missing, unknown or expired.
    """
    session_id = request.cookies.get(get_settings().session.cookie_name)
    try:
        authenticated = await auth.validate_session(session_id)
    except AuthenticationError as e:
        logger.info("session_rejected", reason=e.message, path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "type": "urn:signflow:auth:unauthorized",
                "title": "Unauthorized",
                "status": 401,
                "detail": e.message,
                "instance": str(request.url),
            },
            headers=_blank_cookie_headers() if session_id else None,
        ) from None

    if authenticated.refreshed:
        set_session_cookie(
            response,
            authenticated.session,
            max_age=int(auth.session_ttl.total_seconds()),
        )
    bind_request_user(authenticated.user.id)
    return authenticated.user


async def require_admin(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require an authenticated admin.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if not user.is_admin:
        logger.warning("admin_required", user_id=str(user.id), path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "type": "urn:signflow:auth:forbidden",
                "title": "Forbidden",
                "status": 403,
                "detail": "Access denied. Administrators only.",
                "instance": str(request.url),
            },
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
