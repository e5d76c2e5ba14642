"""Clicksign API error hierarchy."""

from __future__ import annotations

from typing import Any

from signflow.domain.errors import SigningProviderError


class ClicksignError(SigningProviderError):
    """Base exception for Clicksign API errors.

    Attributes:
        title: Title of the first reported error.
        detail: Detail of the first reported error.
        request_id: Value of the x-request-id response header.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        title: str | None = None,
        detail: str | None = None,
        request_id: str | None = None,
        code: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, code=code, errors=errors)
        self.title = title
        self.detail = detail or message
        self.request_id = request_id


class ClicksignTransientError(ClicksignError):
    """Transient error that may succeed on retry (timeouts, 429, 5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, status_code=status_code, **kwargs)
        self.retry_after = retry_after


class ClicksignPermanentError(ClicksignError):
    """Permanent error that should not be retried (other 4xx)."""
