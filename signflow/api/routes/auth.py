"""Authentication routes: sign-up, sign-in, sign-out and current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from signflow.api.auth.session_auth import (
    CurrentUser,
    blank_session_cookie,
    set_session_cookie,
)
from signflow.api.dependencies import get_auth_service
from signflow.api.errors import to_http_exception
from signflow.api.models.auth import (
    AuthResponse,
    SignInRequest,
    SignUpRequest,
    SuccessResponse,
    UserResponse,
)
from signflow.application.services.auth_service import AuthService
from signflow.config.settings import get_settings
from signflow.domain.exceptions import SignflowError

router = APIRouter(prefix="/v1/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/sign-up", response_model=AuthResponse)
async def sign_up(
    body: SignUpRequest, request: Request, response: Response, auth: AuthServiceDep
) -> AuthResponse:
    """Create an account and open a session.

    Raises:
        HTTPException 400: Missing email or short password.
        HTTPException 409: Email already in use.
    """
    try:
        authenticated = await auth.sign_up(
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="auth") from None
    set_session_cookie(
        response, authenticated.session, max_age=int(auth.session_ttl.total_seconds())
    )
    return AuthResponse(user=UserResponse.from_user(authenticated.user))


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    body: SignInRequest, request: Request, response: Response, auth: AuthServiceDep
) -> AuthResponse:
    """Open a session for valid credentials.

    Raises:
        HTTPException 401: "Invalid email or password".
    """
    try:
        authenticated = await auth.sign_in(body.email, body.password)
    except SignflowError as e:
        raise to_http_exception(e, request, area="auth") from None
    set_session_cookie(
        response, authenticated.session, max_age=int(auth.session_ttl.total_seconds())
    )
    return AuthResponse(user=UserResponse.from_user(authenticated.user))


@router.post("/sign-out", response_model=SuccessResponse)
async def sign_out(
    request: Request, response: Response, auth: AuthServiceDep
) -> SuccessResponse:
    """Invalidate the current session and blank the cookie."""
    session_id = request.cookies.get(get_settings().session.cookie_name)
    if session_id:
        await auth.sign_out(session_id)
    blank_session_cookie(response)
    return SuccessResponse(message="Signed out")


@router.get("/user", response_model=UserResponse)
async def current_user(user: CurrentUser) -> UserResponse:
    """Return the authenticated user (401 when not signed in)."""
    return UserResponse.from_user(user)
