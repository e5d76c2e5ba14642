"""Cookie session authentication for API routes."""

from signflow.api.auth.session_auth import (
    AdminUser,
    CurrentUser,
    blank_session_cookie,
    get_current_user,
    require_admin,
    set_session_cookie,
)

__all__: list[str] = [
    "AdminUser",
    "CurrentUser",
    "blank_session_cookie",
    "get_current_user",
    "require_admin",
    "set_session_cookie",
]
