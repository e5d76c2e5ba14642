"""Per-request log context: correlation ID and the signed-in user.

Both values live in ContextVars so every log line emitted while serving a
request (services, repositories, the Clicksign client) carries them
without threading them through call signatures.
"""

import re
from contextvars import ContextVar, Token
from typing import Any
from uuid import uuid4

# Inbound IDs are echoed into logs and headers; anything else is replaced
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_user_id: ContextVar[str] = ContextVar("user_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def accept_correlation_id(candidate: str | None) -> str:
    """Use the caller's ``X-Correlation-ID`` when it is well formed, else a new one."""
    if candidate and _VALID_CORRELATION_ID.match(candidate):
        return candidate
    return generate_correlation_id()


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token[str]:
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def get_request_user_id() -> str:
    return _user_id.get()


def bind_request_user(user_id: object) -> None:
    """Attach the authenticated user to the current request's log context."""
    _user_id.set(str(user_id))


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor stamping correlation_id and user_id when set."""
    correlation_id = _correlation_id.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    user_id = _user_id.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)
    return event_dict
