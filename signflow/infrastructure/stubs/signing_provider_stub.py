"""In-memory signing provider for development and tests.

Keeps envelopes, documents, signers and requirements in dicts and
records every call so tests can assert on the orchestration order.
"""

from __future__ import annotations

from dataclasses import replace
from itertools import count
from typing import Any

from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.domain.errors import SigningProviderError
from signflow.domain.models.provider import (
    ENVELOPE_ACTIVE_STATUSES,
    ProviderDocument,
    ProviderEnvelope,
    ProviderEvent,
    ProviderRequirement,
    ProviderSigner,
    SignerInput,
)


class SigningProviderStub(SigningProviderProtocol):
    """Stub implementation of SigningProviderProtocol.

    Attributes:
        calls: (operation, args) tuples in call order.
        failures: Operation name -> error raised on the next call.
        files: URL -> content returned by download().
    """

    def __init__(self) -> None:
        self._ids = count(1)
        self.envelopes: dict[str, ProviderEnvelope] = {}
        self.documents: dict[str, ProviderDocument] = {}
        self.document_envelopes: dict[str, str] = {}
        self.signers: dict[str, tuple[str, ProviderSigner]] = {}
        self.requirements: dict[str, tuple[str, ProviderRequirement]] = {}
        self.events: dict[str, list[ProviderEvent]] = {}
        self.files: dict[str, bytes] = {}
        self.failures: dict[str, SigningProviderError] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        error = self.failures.pop(operation, None)
        if error is not None:
            raise error

    def fail_next(self, operation: str, error: SigningProviderError | None = None) -> None:
        """Make the next call of an operation raise."""
        self.failures[operation] = error or SigningProviderError(
            f"{operation} failed", status_code=422
        )

    def called(self, operation: str) -> list[tuple[Any, ...]]:
        """Arguments of every call to an operation."""
        return [args for name, args in self.calls if name == operation]

    def set_envelope_status(self, envelope_id: str, status: str) -> None:
        self.envelopes[envelope_id] = replace(self.envelopes[envelope_id], status=status)

    def set_document(self, document_id: str, **changes: Any) -> None:
        """Update document status, finished_at or download URLs."""
        self.documents[document_id] = replace(self.documents[document_id], **changes)

    def set_signer_status(self, signer_id: str, status: str) -> None:
        envelope_id, signer = self.signers[signer_id]
        self.signers[signer_id] = (envelope_id, replace(signer, status=status))

    def _not_found(self, resource: str, resource_id: str) -> SigningProviderError:
        return SigningProviderError(f"{resource} {resource_id} not found", status_code=404)

    async def create_envelope(
        self,
        name: str,
        locale: str = "pt-BR",
        auto_close: bool = True,
        remind_interval: int | None = None,
        block_after_refusal: bool | None = None,
        deadline_at: str | None = None,
    ) -> str:
        self._record("create_envelope", name)
        envelope_id = self._next_id("env")
        self.envelopes[envelope_id] = ProviderEnvelope(id=envelope_id, status="draft", name=name)
        return envelope_id

    async def update_envelope(
        self, envelope_id: str, attributes: dict[str, Any]
    ) -> ProviderEnvelope:
        self._record("update_envelope", envelope_id, attributes)
        envelope = await self.get_envelope(envelope_id)
        if "status" in attributes:
            envelope = replace(envelope, status=attributes["status"])
            self.envelopes[envelope_id] = envelope
        return envelope

    async def get_envelope(self, envelope_id: str) -> ProviderEnvelope:
        if envelope_id not in self.envelopes:
            raise self._not_found("envelope", envelope_id)
        return self.envelopes[envelope_id]

    async def get_envelope_status(self, envelope_id: str) -> str:
        self._record("get_envelope_status", envelope_id)
        return (await self.get_envelope(envelope_id)).status

    async def activate_envelope(self, envelope_id: str) -> None:
        self._record("activate_envelope", envelope_id)
        envelope = await self.get_envelope(envelope_id)
        if envelope.status not in ENVELOPE_ACTIVE_STATUSES:
            self.envelopes[envelope_id] = replace(envelope, status="running")

    async def notify_envelope(self, envelope_id: str, message: str | None = None) -> None:
        self._record("notify_envelope", envelope_id, message)

    async def delete_envelope(self, envelope_id: str) -> None:
        self._record("delete_envelope", envelope_id)
        if self.envelopes.pop(envelope_id, None) is None:
            raise self._not_found("envelope", envelope_id)

    async def add_document(
        self,
        envelope_id: str,
        filename: str,
        content_base64: str | None = None,
        template: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        self._record("add_document", envelope_id, filename)
        await self.get_envelope(envelope_id)
        document_id = self._next_id("doc")
        self.documents[document_id] = ProviderDocument(id=document_id, status="draft")
        self.document_envelopes[document_id] = envelope_id
        return document_id

    async def get_document(self, envelope_id: str, document_id: str) -> ProviderDocument:
        if document_id not in self.documents:
            raise self._not_found("document", document_id)
        return self.documents[document_id]

    async def get_document_status(
        self, document_id: str, envelope_id: str | None = None
    ) -> ProviderDocument:
        self._record("get_document_status", document_id, envelope_id)
        return await self.get_document(envelope_id or "", document_id)

    async def delete_document(self, envelope_id: str, document_id: str) -> None:
        self._record("delete_document", envelope_id, document_id)
        if self.documents.pop(document_id, None) is None:
            raise self._not_found("document", document_id)

    async def add_signer(self, envelope_id: str, signer: SignerInput) -> str:
        self._record("add_signer", envelope_id, signer)
        signer_id = self._next_id("sig")
        self.signers[signer_id] = (
            envelope_id,
            ProviderSigner(
                id=signer_id,
                name=signer.name,
                email=signer.email,
                status="pending",
                phone_number=signer.phone_number,
            ),
        )
        return signer_id

    async def get_signers(self, envelope_id: str) -> list[ProviderSigner]:
        self._record("get_signers", envelope_id)
        return [s for env, s in self.signers.values() if env == envelope_id]

    async def delete_signer(self, envelope_id: str, signer_id: str) -> None:
        self._record("delete_signer", envelope_id, signer_id)
        if self.signers.pop(signer_id, None) is None:
            raise self._not_found("signer", signer_id)

    def _add_requirement(
        self, envelope_id: str, document_id: str, signer_id: str, **attributes: Any
    ) -> ProviderRequirement:
        requirement = ProviderRequirement(
            id=self._next_id("req"),
            document_id=document_id,
            signer_id=signer_id,
            **attributes,
        )
        self.requirements[requirement.id] = (envelope_id, requirement)
        return requirement

    async def add_signature_requirement(
        self, envelope_id: str, document_id: str, signer_id: str
    ) -> ProviderRequirement:
        self._record("add_signature_requirement", envelope_id, document_id, signer_id)
        return self._add_requirement(
            envelope_id, document_id, signer_id, action="agree", role="sign"
        )

    async def add_auth_requirement(
        self, envelope_id: str, document_id: str, signer_id: str, auth: str = "icp_brasil"
    ) -> ProviderRequirement:
        self._record("add_auth_requirement", envelope_id, document_id, signer_id, auth)
        return self._add_requirement(
            envelope_id, document_id, signer_id, action="provide_evidence", auth=auth
        )

    async def bulk_requirements(
        self, envelope_id: str, operations: list[dict[str, Any]]
    ) -> list[ProviderRequirement]:
        self._record("bulk_requirements", envelope_id, operations)
        return []

    async def get_requirements(self, envelope_id: str) -> list[ProviderRequirement]:
        self._record("get_requirements", envelope_id)
        return [r for env, r in self.requirements.values() if env == envelope_id]

    async def get_document_events(
        self, envelope_id: str, document_id: str
    ) -> list[ProviderEvent]:
        self._record("get_document_events", envelope_id, document_id)
        return list(self.events.get(document_id, []))

    async def get_envelope_events(self, envelope_id: str) -> list[ProviderEvent]:
        self._record("get_envelope_events", envelope_id)
        return list(self.events.get(envelope_id, []))

    async def download(self, url: str) -> bytes:
        self._record("download", url)
        if url not in self.files:
            raise self._not_found("file", url)
        return self.files[url]
