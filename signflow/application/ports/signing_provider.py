"""Signing provider port.

Mirrors the provider's REST resource model: envelopes contain documents
and signers; requirements bind a signer to a document with an action
("agree" to sign, "provide_evidence" to authenticate).

All methods raise SigningProviderError on provider failures.
"""

from __future__ import annotations

from typing import Any, Protocol

from signflow.domain.models.provider import (
    ProviderDocument,
    ProviderEnvelope,
    ProviderEvent,
    ProviderRequirement,
    ProviderSigner,
    SignerInput,
)


class SigningProviderProtocol(Protocol):
    """Client for the e-signature provider."""

    async def create_envelope(
        self,
        name: str,
        locale: str = "pt-BR",
        auto_close: bool = True,
        remind_interval: int | None = None,
        block_after_refusal: bool | None = None,
        deadline_at: str | None = None,
    ) -> str:
        """Create an envelope and return its id."""
        ...

    async def update_envelope(
        self, envelope_id: str, attributes: dict[str, Any]
    ) -> ProviderEnvelope: ...

    async def get_envelope(self, envelope_id: str) -> ProviderEnvelope: ...

    async def get_envelope_status(self, envelope_id: str) -> str: ...

    async def activate_envelope(self, envelope_id: str) -> None:
        """Move the envelope to running unless already active/running/closed."""
        ...

    async def notify_envelope(self, envelope_id: str, message: str | None = None) -> None: ...

    async def delete_envelope(self, envelope_id: str) -> None: ...

    async def add_document(
        self,
        envelope_id: str,
        filename: str,
        content_base64: str | None = None,
        template: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Upload a document (base64 data URI or template) and return its id."""
        ...

    async def get_document(self, envelope_id: str, document_id: str) -> ProviderDocument: ...

    async def get_document_status(
        self, document_id: str, envelope_id: str | None = None
    ) -> ProviderDocument: ...

    async def delete_document(self, envelope_id: str, document_id: str) -> None: ...

    async def add_signer(self, envelope_id: str, signer: SignerInput) -> str:
        """Create a signer and return its id."""
        ...

    async def get_signers(self, envelope_id: str) -> list[ProviderSigner]: ...

    async def delete_signer(self, envelope_id: str, signer_id: str) -> None: ...

    async def add_signature_requirement(
        self, envelope_id: str, document_id: str, signer_id: str
    ) -> ProviderRequirement: ...

    async def add_auth_requirement(
        self, envelope_id: str, document_id: str, signer_id: str, auth: str = "icp_brasil"
    ) -> ProviderRequirement: ...

    async def bulk_requirements(
        self, envelope_id: str, operations: list[dict[str, Any]]
    ) -> list[ProviderRequirement]: ...

    async def get_requirements(self, envelope_id: str) -> list[ProviderRequirement]: ...

    async def get_document_events(
        self, envelope_id: str, document_id: str
    ) -> list[ProviderEvent]: ...

    async def get_envelope_events(self, envelope_id: str) -> list[ProviderEvent]: ...

    async def download(self, url: str) -> bytes:
        """Fetch a file URL (absolute or relative to the provider host)."""
        ...
