"""RFC 7807 problem details for domain errors.

Routes translate domain errors with ``problem()`` / ``to_http_exception()``;
``register_exception_handlers()`` maps anything that escapes a route the
same way.
"""

from __future__ import annotations

import re

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from structlog import get_logger

from signflow.config.settings import get_settings
from signflow.domain.errors import (
    AuthenticationError,
    CertificateError,
    CertificatePasswordError,
    ConflictError,
    NotFoundError,
    PasswordEncryptionError,
    PermissionDeniedError,
    SigningProviderError,
    SigningProviderNotConfiguredError,
    ValidationError,
)
from signflow.domain.exceptions import SignflowError

logger = get_logger()

GENERIC_ERROR_DETAIL = "An unexpected error occurred. Please try again."

_SLUG_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Most specific first
_STATUS_BY_ERROR: tuple[tuple[type[SignflowError], int, str], ...] = (
    (SigningProviderNotConfiguredError, 503, "Signing Provider Not Configured"),
    (SigningProviderError, 502, "Signing Provider Error"),
    (CertificatePasswordError, 400, "Invalid Certificate Password"),
    (PasswordEncryptionError, 500, "Password Encryption Error"),
    (NotFoundError, 404, "Not Found"),
    (PermissionDeniedError, 403, "Forbidden"),
    (AuthenticationError, 401, "Unauthorized"),
    (ConflictError, 409, "Conflict"),
    (ValidationError, 400, "Bad Request"),
    (CertificateError, 400, "Certificate Error"),
)


def _slug(error: Exception) -> str:
    name = type(error).__name__.removesuffix("Error") or "error"
    return _SLUG_BOUNDARY.sub("-", name).lower()


def status_for(error: SignflowError) -> tuple[int, str]:
    """HTTP status and title for a domain error."""
    for error_type, status_code, title in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code, title
    return 500, "Internal Server Error"


def problem(
    request: Request,
    status_code: int,
    area: str,
    slug: str,
    title: str,
    detail: str,
    headers: dict[str, str] | None = None,
    **extensions: object,
) -> HTTPException:
    """Build an HTTPException carrying an RFC 7807 body."""
    body: dict[str, object] = {
        "type": f"urn:signflow:{area}:{slug}",
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": str(request.url),
    }
    body.update(extensions)
    return HTTPException(status_code=status_code, detail=body, headers=headers)


def to_http_exception(
    error: SignflowError,
    request: Request,
    area: str,
    status_code: int | None = None,
) -> HTTPException:
    """Translate a domain error into an RFC 7807 HTTPException.

    Args:
        error: The domain error.
        request: Current request (for ``instance``).
        area: URN area, e.g. "documents".
        status_code: Override for the default status of the error type.
    """
    default_status, title = status_for(error)
    status_code = status_code or default_status
    detail = error.message or title
    if status_code >= 500 and get_settings().is_production:
        detail = GENERIC_ERROR_DETAIL
    extensions: dict[str, object] = {}
    if isinstance(error, ValidationError) and error.field:
        extensions["field"] = error.field
    return problem(request, status_code, area, _slug(error), title, detail, **extensions)


async def signflow_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, SignflowError):
        raise exc
    http_exc = to_http_exception(exc, request, area="app")
    logger.warning(
        "unhandled_domain_error",
        error_type=type(exc).__name__,
        status_code=http_exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", path=request.url.path, error_type=type(exc).__name__)
    detail = GENERIC_ERROR_DETAIL if get_settings().is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content={
            "type": "urn:signflow:app:internal-error",
            "title": "Internal Server Error",
            "status": 500,
            "detail": detail or GENERIC_ERROR_DETAIL,
            "instance": str(request.url),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SignflowError, signflow_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
