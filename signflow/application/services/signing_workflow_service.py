"""Signing workflow service: provider orchestration.

Drives the provider through the envelope lifecycle in the order it
requires:

1. create an envelope (draft)
2. upload the PDF and wait until the provider has processed it
3. create each signer with an "agree" requirement and an ICP-Brasil
   authentication requirement
4. verify every signer has its requirement, then activate the envelope
5. notify the signers
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import UUID

from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.application.services.base import LoggingMixin
from signflow.config.settings import ClicksignConfig
from signflow.domain.errors import (
    CertificateNotUsableError,
    NotFoundError,
    SigningProviderError,
)
from signflow.domain.models.certificate import CertificateStatus, PersonType
from signflow.domain.models.provider import (
    DOCUMENT_PROCESSING_STATUSES,
    ENVELOPE_ACTIVE_STATUSES,
    CommunicateEvents,
    ProviderEvent,
    ProviderRequirement,
    SignerInput,
)

T = TypeVar("T")

ENVELOPE_LOCALE = "pt-BR"
NO_REQUIREMENTS_ERROR_CODE = "100"


@dataclass(frozen=True)
class SignerData:
    """A signer as requested by the user, before it exists at the provider."""

    name: str
    email: str
    document_number: str
    document_type: PersonType
    phone_number: str
    identification: str
    order: int
    certificate_id: UUID | None = None


@dataclass(frozen=True)
class CreatedEnvelope:
    envelope_id: str
    status: str


@dataclass(frozen=True)
class AddedSigner:
    """Provider keys created for one signer."""

    signer_id: str
    signature_requirement: ProviderRequirement
    auth_requirement: ProviderRequirement


class SigningWorkflowService(LoggingMixin):
    """Orchestrates envelopes, documents, signers and requirements."""

    def __init__(
        self,
        provider: SigningProviderProtocol,
        certificates: CertificateRepositoryProtocol,
        config: ClicksignConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._certificates = certificates
        self._config = config
        self._sleep = sleep
        self._init_logger(component="signing")

    async def create_envelope(self, name: str) -> CreatedEnvelope:
        log = self._log_operation("create_envelope")
        envelope_id = await self._provider.create_envelope(
            name, locale=ENVELOPE_LOCALE, auto_close=True
        )
        status = await self._provider.get_envelope_status(envelope_id)
        log.info("envelope_created", envelope_id=envelope_id, status=status)
        return CreatedEnvelope(envelope_id=envelope_id, status=status)

    async def upload_document(
        self, envelope_id: str, filename: str, content_base64: str
    ) -> str:
        """Upload a PDF and wait until the provider has processed it.

        The wait is best effort: after the configured number of checks the
        workflow proceeds anyway, since requirement creation retries on
        "document not available".

        Returns:
            The provider document id.
        """
        log = self._log_operation("upload_document", envelope_id=envelope_id)
        document_id = await self._provider.add_document(
            envelope_id, filename, content_base64=content_base64
        )
        log = log.bind(document_id=document_id)

        retries = self._config.document_check_retries
        for attempt in range(1, retries + 1):
            try:
                document = await self._provider.get_document_status(
                    document_id, envelope_id
                )
            except SigningProviderError as e:
                # 404 right after upload means the provider is still processing
                log.warning(
                    "document_status_check_failed",
                    attempt=attempt,
                    status_code=e.status_code,
                    error=e.message,
                )
            else:
                if document.status and document.status not in DOCUMENT_PROCESSING_STATUSES:
                    log.info("document_available", status=document.status, attempts=attempt)
                    return document_id
            if attempt < retries:
                await self._sleep(self._config.document_check_interval)

        log.warning("document_not_verified", attempts=retries)
        return document_id

    async def _check_certificate(self, certificate_id: UUID, user_id: UUID) -> None:
        certificate = await self._certificates.get(certificate_id)
        if certificate is None:
            raise NotFoundError("certificate", certificate_id)
        if certificate.user_id != user_id:
            raise CertificateNotUsableError("Certificate does not belong to the user")
        if certificate.status != CertificateStatus.ACTIVE:
            raise CertificateNotUsableError(
                f"Certificate is not active: {certificate.status.value}"
            )
        if certificate.is_expired(datetime.now(timezone.utc)):
            raise CertificateNotUsableError(
                f"Certificate expired. Valid until: {certificate.valid_to.isoformat()}"
            )

    async def _with_requirement_retries(
        self, create: Callable[[], Awaitable[T]]
    ) -> T:
        retries = self._config.requirement_retries
        for attempt in range(1, retries + 1):
            try:
                return await create()
            except SigningProviderError as e:
                if e.is_document_unavailable and attempt < retries:
                    await self._sleep(self._config.requirement_retry_delay)
                    continue
                raise
        raise SigningProviderError("Could not create requirement")  # pragma: no cover

    async def add_signer(
        self,
        envelope_id: str,
        document_id: str,
        signer: SignerData,
        user_id: UUID,
    ) -> AddedSigner:
        """Create a signer at the provider with its two requirements.

        Raises:
            NotFoundError: If the referenced certificate does not exist.
            CertificateNotUsableError: If the certificate is not the user's,
                not active or expired.
            ValidationError: If the provider rejects the name or email.
            SigningProviderError: On provider failures.
        """
        log = self._log_operation(
            "add_signer", envelope_id=envelope_id, order=signer.order
        )
        if signer.certificate_id is not None:
            await self._check_certificate(signer.certificate_id, user_id)

        signer_id = await self._provider.add_signer(
            envelope_id,
            SignerInput(
                name=signer.name,
                email=signer.email,
                phone_number=signer.phone_number or None,
                has_documentation=True,
                refusable=False,
                group=signer.order,
                communicate_events=CommunicateEvents(),
            ),
        )
        signature = await self._with_requirement_retries(
            lambda: self._provider.add_signature_requirement(
                envelope_id, document_id, signer_id
            )
        )
        auth = await self._with_requirement_retries(
            lambda: self._provider.add_auth_requirement(
                envelope_id, document_id, signer_id, "icp_brasil"
            )
        )
        log.info(
            "signer_added",
            signer_id=signer_id,
            signature_requirement_id=signature.id,
            auth_requirement_id=auth.id,
        )
        return AddedSigner(
            signer_id=signer_id, signature_requirement=signature, auth_requirement=auth
        )

    async def verify_all_signers_have_requirements(
        self, envelope_id: str, expected: int
    ) -> bool:
        """Check that at least ``expected`` "agree" requirements exist.

        Provider failures are treated as success so that a flaky listing
        endpoint does not block activation.
        """
        log = self._log_operation("verify_requirements", envelope_id=envelope_id)
        try:
            requirements = await self._provider.get_requirements(envelope_id)
        except SigningProviderError as e:
            log.warning("requirements_check_failed", error=e.message)
            return True
        found = sum(1 for r in requirements if r.action == "agree")
        if found < expected:
            log.warning("requirements_missing", expected=expected, found=found)
            return False
        return True

    async def activate_envelope(self, envelope_id: str) -> str:
        """Activate the envelope and confirm the provider accepted it.

        Returns:
            The envelope status after activation.

        Raises:
            SigningProviderError: If activation fails or the envelope did
                not become active.
        """
        log = self._log_operation("activate_envelope", envelope_id=envelope_id)
        try:
            await self._provider.activate_envelope(envelope_id)
            status = await self._provider.get_envelope_status(envelope_id)
        except SigningProviderError as e:
            if e.code == NO_REQUIREMENTS_ERROR_CODE or "code: 100" in e.message:
                raise SigningProviderError(
                    "Envelope has no documents or signers",
                    status_code=e.status_code,
                    code=e.code,
                ) from e
            raise
        if status not in ENVELOPE_ACTIVE_STATUSES:
            raise SigningProviderError(f"Envelope was not activated. Current status: {status}")
        log.info("envelope_activated", status=status)
        return status

    async def notify(self, envelope_id: str, message: str | None = None) -> None:
        await self._provider.notify_envelope(envelope_id, message)
        self._log_operation("notify", envelope_id=envelope_id).info("signers_notified")

    async def start_signature(self, envelope_id: str, document_id: str) -> str:
        """Return the provider document status once the envelope is running.

        Signing itself happens at the provider; this only confirms the
        document is reachable.
        """
        document = await self._provider.get_document_status(document_id, envelope_id)
        return document.status

    async def get_document_events(
        self, envelope_id: str, document_id: str
    ) -> list[ProviderEvent]:
        return await self._provider.get_document_events(envelope_id, document_id)

    async def get_envelope_events(self, envelope_id: str) -> list[ProviderEvent]:
        return await self._provider.get_envelope_events(envelope_id)

    async def list_requirements(self, envelope_id: str) -> list[ProviderRequirement]:
        return await self._provider.get_requirements(envelope_id)

    async def bulk_update_requirements(
        self, envelope_id: str, operations: list[dict[str, Any]]
    ) -> list[ProviderRequirement]:
        return await self._provider.bulk_requirements(envelope_id, operations)

    async def update_envelope(self, envelope_id: str, attributes: dict[str, Any]) -> None:
        await self._provider.update_envelope(envelope_id, attributes)
