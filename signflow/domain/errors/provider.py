"""Signing provider errors.

The provider adapter raises subclasses of SigningProviderError so that
application services can react to failures without depending on the
HTTP client.
"""

from __future__ import annotations

from typing import Any

from signflow.domain.exceptions import SignflowError

# Messages returned while a freshly uploaded document is processed
DOCUMENT_UNAVAILABLE_MARKERS = ("não está disponível", "not available")


class SigningProviderError(SignflowError):
    """Raised when the e-signature provider rejects or fails a call.

    Attributes:
        status_code: HTTP status returned by the provider (0 when no
            response was received).
        code: Provider-specific error code, when one was reported.
        errors: Raw error entries reported by the provider.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        code: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.errors = errors or []

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_document_unavailable(self) -> bool:
        """Whether the provider is still processing a freshly uploaded document."""
        text = self.message.lower()
        return any(marker in text for marker in DOCUMENT_UNAVAILABLE_MARKERS)


class SigningProviderNotConfiguredError(SigningProviderError):
    """Raised when provider credentials are missing."""

    def __init__(self) -> None:
        super().__init__("Signing provider access token is not configured")
