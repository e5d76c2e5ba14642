"""Signer service: adding, editing and removing document signers.

Every signer exists twice: locally, and at the provider as an envelope
signer with an "agree" requirement and an ICP-Brasil authentication
requirement. Local rows are only written once the provider side
succeeded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.application.services.audit_service import AuditService
from signflow.application.services.base import LoggingMixin
from signflow.application.services.document_service import (
    DocumentService,
    signer_by_id,
)
from signflow.application.services.signing_workflow_service import (
    SignerData,
    SigningWorkflowService,
)
from signflow.domain.errors import ValidationError
from signflow.domain.exceptions import SignflowError
from signflow.domain.models.audit import AuditAction
from signflow.domain.models.certificate import PersonType
from signflow.domain.models.document import (
    Document,
    DocumentStatus,
    Signer,
    SignerStatus,
)
from signflow.domain.models.user import User
from signflow.domain.services.tax_id import only_digits, validate_document

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REMOVABLE_ENVELOPE_STATUSES = frozenset({"draft", "running"})
DEFAULT_SIGNATURE_TYPE = "electronic"


def _tax_id_label(kind: PersonType) -> str:
    return "CPF" if kind == PersonType.PF else "CNPJ"


def _parse_document_type(value: str | PersonType | None) -> PersonType:
    if isinstance(value, PersonType):
        return value
    try:
        return PersonType(value or "")
    except ValueError:
        raise ValidationError(
            "Document type is required and must be PF or PJ", field="documentType"
        ) from None


def _clean_tax_id(value: str | None, kind: PersonType) -> str:
    digits = only_digits(str(value or "").strip())
    label = _tax_id_label(kind)
    if not digits:
        raise ValidationError(f"{label} is required", field="documentNumber")
    if not validate_document(digits, kind):
        raise ValidationError(f"Invalid {label}", field="documentNumber")
    return digits


@dataclass(frozen=True)
class SignerRequest:
    """Raw signer fields as submitted by a client."""

    name: str | None = None
    email: str | None = None
    document_number: str | None = None
    document_type: str | None = None
    phone_number: str | None = None
    identification: str | None = None
    order: int | None = None
    signature_type: str | None = None
    certificate_id: UUID | None = None


@dataclass(frozen=True)
class SignerChanges:
    """Fields of a signer update; ``None`` leaves a field untouched."""

    name: str | None = None
    email: str | None = None
    document_number: str | None = None
    document_type: str | None = None
    phone_number: str | None = None
    identification: str | None = None
    order: int | None = None
    signature_type: str | None = None


@dataclass(frozen=True)
class BatchSignerError:
    index: int
    name: str
    error: str


@dataclass(frozen=True)
class BatchSignersResult:
    """Outcome of a batch signer creation.

    ``partial`` is set when some entries failed at the provider while
    others were created.
    """

    created: list[Signer] = field(default_factory=list)
    errors: list[BatchSignerError] = field(default_factory=list)
    document: Document | None = None

    @property
    def partial(self) -> bool:
        return bool(self.errors) and bool(self.created)


class BatchSignersError(ValidationError):
    """Raised when no signer of a batch could be created.

    Attributes:
        errors: Per-entry provider errors.
    """

    def __init__(self, message: str, errors: list[BatchSignerError]) -> None:
        self.errors = errors
        super().__init__(message)


class SignerService(LoggingMixin):
    """Signer lifecycle for a document."""

    def __init__(
        self,
        documents: DocumentRepositoryProtocol,
        document_service: DocumentService,
        workflow: SigningWorkflowService,
        provider: SigningProviderProtocol,
        audit: AuditService,
    ) -> None:
        self._documents = documents
        self._document_service = document_service
        self._workflow = workflow
        self._provider = provider
        self._audit = audit
        self._init_logger(component="signers")

    @staticmethod
    def _provider_keys(document: Document) -> tuple[str, str]:
        if not (document.envelope_key and document.document_key):
            raise ValidationError("Document is not configured at the signing provider")
        return document.envelope_key, document.document_key

    def _validate_single(self, request: SignerRequest) -> SignerData:
        name = str(request.name or "").strip()
        if request.name is not None and len(name) < 2:
            raise ValidationError(
                "Signer name is required and must have at least 2 characters",
                field="name",
            )
        email = str(request.email or "").strip()
        if not request.phone_number or not str(request.phone_number).strip():
            raise ValidationError("Phone number is required", field="phoneNumber")
        if not request.identification or not str(request.identification).strip():
            raise ValidationError("Identification is required", field="identification")
        kind = _parse_document_type(request.document_type)
        if not name or not email:
            raise ValidationError("Name and email are required")
        document_number = _clean_tax_id(request.document_number, kind)
        return SignerData(
            name=name,
            email=email,
            document_number=document_number,
            document_type=kind,
            phone_number=str(request.phone_number).strip(),
            identification=str(request.identification).strip(),
            order=request.order or 0,
            certificate_id=request.certificate_id,
        )

    @staticmethod
    def _validate_batch_entry(request: SignerRequest) -> SignerData:
        required = (
            request.name,
            request.email,
            request.document_number,
            request.document_type,
            request.phone_number,
            request.identification,
        )
        if not all(required):
            raise ValidationError(
                "Every signer must have name, email, documentNumber, documentType, "
                "phoneNumber and identification"
            )
        kind = _parse_document_type(request.document_type)
        digits = only_digits(str(request.document_number).strip())
        if not validate_document(digits, kind):
            raise ValidationError(
                f'Invalid {_tax_id_label(kind)} for signer "{request.name}"',
                field="documentNumber",
            )
        name = str(request.name).strip()
        if len(name) < 2:
            raise ValidationError(
                f'Signer name "{request.name}" must have at least 2 characters',
                field="name",
            )
        # the provider requires first and last name
        if len(name.split()) < 2:
            raise ValidationError(
                f'Signer name "{request.name}" must contain first and last name',
                field="name",
            )
        email = str(request.email).strip()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError(f'Signer email "{request.email}" is invalid', field="email")
        return SignerData(
            name=name,
            email=email,
            document_number=digits,
            document_type=kind,
            phone_number=str(request.phone_number).strip(),
            identification=str(request.identification).strip(),
            order=request.order or 0,
            certificate_id=request.certificate_id,
        )

    async def add(
        self,
        user: User,
        document_id: UUID,
        request: SignerRequest,
        ip: str | None = None,
    ) -> Signer:
        """Create one signer at the provider and locally.

        Raises:
            ValidationError: If a field is invalid or the document has no
                provider keys.
            NotFoundError: If the document does not exist.
            PermissionDeniedError: If the user may not edit the document.
            SigningProviderError: On provider failures.
        """
        data = self._validate_single(request)
        document = await self._document_service.load(user, document_id)
        order = request.order or len(document.signers) + 1
        data = replace(data, order=order)
        envelope_key, document_key = self._provider_keys(document)

        log = self._log_operation("add_signer", document_id=str(document_id))
        added = await self._workflow.add_signer(envelope_key, document_key, data, user.id)
        signer = Signer(
            id=uuid7(),
            document_id=document.id,
            name=data.name,
            email=data.email,
            document_number=data.document_number,
            document_type=data.document_type,
            phone_number=data.phone_number,
            identification=data.identification,
            order=order,
            signature_type=request.signature_type or DEFAULT_SIGNATURE_TYPE,
            provider_signer_key=added.signer_id,
            provider_requirement_key=added.signature_requirement.id,
            certificate_id=data.certificate_id,
        )
        await self._documents.add_signers([signer])
        await self._document_service.set_status(document, DocumentStatus.WAITING_SIGNERS)

        await self._audit.record(
            user,
            AuditAction.SIGNER_ADD,
            ip=ip,
            document_id=document.id,
            document_name=document.name,
            details={"signer_id": str(signer.id), "name": signer.name, "order": order},
        )
        log.info("signer_created", signer_id=str(signer.id), order=order)
        return signer

    async def update(
        self,
        user: User,
        document_id: UUID,
        signer_id: UUID,
        changes: SignerChanges,
    ) -> Signer:
        """Edit a signer that has not signed yet.

        A new document number is checked against the new type, or the
        stored one when no type is sent. A type change re-checks the stored
        number.
        """
        document = await self._document_service.load(user, document_id)
        signer = signer_by_id(document, signer_id)
        if signer.status == SignerStatus.SIGNED:
            raise ValidationError("Cannot edit a signer who has already signed")

        updates: dict[str, Any] = {}
        if changes.document_type is not None:
            updates["document_type"] = _parse_document_type(changes.document_type)
        if changes.document_number is not None or "document_type" in updates:
            number = (
                signer.document_number
                if changes.document_number is None
                else changes.document_number
            )
            updates["document_number"] = _clean_tax_id(
                number, updates.get("document_type", signer.document_type)
            )
        if changes.name:
            updates["name"] = changes.name.strip()
        if changes.email:
            updates["email"] = changes.email.strip()
        if changes.phone_number is not None:
            updates["phone_number"] = changes.phone_number.strip()
        if changes.identification is not None:
            updates["identification"] = changes.identification.strip()
        if changes.signature_type:
            updates["signature_type"] = changes.signature_type
        if changes.order is not None:
            updates["order"] = changes.order

        updated = await self._documents.update_signer(replace(signer, **updates))
        self._log_operation("update_signer", document_id=str(document_id)).info(
            "signer_updated", signer_id=str(signer_id), fields=sorted(updates)
        )
        return updated

    async def remove(
        self,
        user: User,
        document_id: UUID,
        signer_id: UUID,
        ip: str | None = None,
    ) -> None:
        """Remove a signer locally and at the provider.

        Raises:
            ValidationError: If the signer already signed or the envelope
                is no longer draft or running.
        """
        document = await self._document_service.load(user, document_id)
        signer = signer_by_id(document, signer_id)
        if signer.status == SignerStatus.SIGNED:
            raise ValidationError("Cannot remove a signer who has already signed")

        log = self._log_operation("remove_signer", document_id=str(document_id))
        if document.envelope_key and signer.provider_signer_key:
            status = await self._provider.get_envelope_status(document.envelope_key)
            if status not in REMOVABLE_ENVELOPE_STATUSES:
                raise ValidationError("Cannot remove a signer from a finished envelope")
            await self._provider.delete_signer(
                document.envelope_key, signer.provider_signer_key
            )
            log.info("provider_signer_deleted", provider_signer_id=signer.provider_signer_key)

        await self._documents.delete_signer(signer_id)
        await self._audit.record(
            user,
            AuditAction.SIGNER_REMOVE,
            ip=ip,
            document_id=document.id,
            document_name=document.name,
            details={"signer_id": str(signer_id), "name": signer.name},
        )
        log.info("signer_removed", signer_id=str(signer_id))

    async def add_batch(
        self,
        user: User,
        document_id: UUID,
        requests: list[SignerRequest],
        ip: str | None = None,
    ) -> BatchSignersResult:
        """Create several signers in one go.

        Every entry is validated up front. Provider failures are then
        collected per entry; the signers that made it to the provider are
        saved together.

        Raises:
            ValidationError: If the list is empty, an entry is invalid, or
                every entry failed at the provider.
        """
        if not requests:
            raise ValidationError("Signer list is required and cannot be empty")
        entries = [self._validate_batch_entry(r) for r in requests]

        document = await self._document_service.load(user, document_id)
        envelope_key, document_key = self._provider_keys(document)
        log = self._log_operation("add_signers_batch", document_id=str(document_id))

        signers: list[Signer] = []
        errors: list[BatchSignerError] = []
        for index, (data, request) in enumerate(zip(entries, requests)):
            if not data.order:
                data = replace(data, order=len(document.signers) + index + 1)
            try:
                added = await self._workflow.add_signer(
                    envelope_key, document_key, data, user.id
                )
            except SignflowError as e:
                log.warning("batch_signer_failed", index=index, error=e.message)
                errors.append(BatchSignerError(index=index, name=data.name, error=e.message))
                continue
            signers.append(
                Signer(
                    id=uuid7(),
                    document_id=document.id,
                    name=data.name,
                    email=data.email,
                    document_number=data.document_number,
                    document_type=data.document_type,
                    phone_number=data.phone_number,
                    identification=data.identification,
                    order=data.order,
                    signature_type=request.signature_type or DEFAULT_SIGNATURE_TYPE,
                    provider_signer_key=added.signer_id,
                    provider_requirement_key=added.signature_requirement.id,
                    certificate_id=data.certificate_id,
                )
            )

        if not signers:
            if len(errors) == 1:
                message = errors[0].error
            else:
                summary = ", ".join(f"{e.name}: {e.error}" for e in errors)
                message = f"All {len(errors)} signers failed. Errors: {summary}"
            raise BatchSignersError(message, errors)

        created = await self._documents.add_signers(signers)
        await self._workflow.verify_all_signers_have_requirements(envelope_key, len(created))
        await self._document_service.set_status(document, DocumentStatus.WAITING_SIGNERS)
        document = await self._document_service.reload(document.id)

        for signer in created:
            await self._audit.record(
                user,
                AuditAction.SIGNER_ADD,
                ip=ip,
                document_id=document.id,
                document_name=document.name,
                details={"signer_id": str(signer.id), "name": signer.name, "order": signer.order},
            )
        log.info("batch_signers_created", created=len(created), failed=len(errors))
        return BatchSignersResult(created=created, errors=errors, document=document)

