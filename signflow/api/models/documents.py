"""Document and signer API models."""

from typing import Any
from uuid import UUID

from pydantic import Field

from signflow.api.models.base import CamelModel, DateTimeWithZ
from signflow.domain.models.document import Document, Signer
from signflow.domain.models.provider import ProviderEvent, ProviderRequirement


class SignerResponse(CamelModel):
    id: UUID
    name: str
    email: str
    document_number: str
    document_type: str
    phone_number: str
    identification: str
    order: int
    signature_type: str
    status: str
    certificate_id: UUID | None = None
    provider_signer_key: str | None = None
    provider_requirement_key: str | None = None
    signed_at: DateTimeWithZ | None = None

    @classmethod
    def from_signer(cls, signer: Signer) -> "SignerResponse":
        return cls(
            id=signer.id,
            name=signer.name,
            email=signer.email,
            document_number=signer.document_number,
            document_type=signer.document_type.value,
            phone_number=signer.phone_number,
            identification=signer.identification,
            order=signer.order,
            signature_type=signer.signature_type,
            status=signer.status.value,
            certificate_id=signer.certificate_id,
            provider_signer_key=signer.provider_signer_key,
            provider_requirement_key=signer.provider_requirement_key,
            signed_at=signer.signed_at,
        )


class DocumentResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    file_name: str
    file_size: int
    page_count: int
    status: str
    hash: str | None = None
    signed_hash: str | None = None
    envelope_key: str | None = None
    document_key: str | None = None
    uploaded_at: DateTimeWithZ
    signed_at: DateTimeWithZ | None = None
    signers: list[SignerResponse] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: Document, with_hashes: bool = False) -> "DocumentResponse":
        return cls(
            id=document.id,
            user_id=document.user_id,
            name=document.name,
            file_name=document.file_name,
            file_size=document.file_size,
            page_count=document.page_count,
            status=document.status.value,
            hash=document.hash if with_hashes else None,
            signed_hash=document.signed_hash if with_hashes else None,
            envelope_key=document.envelope_key,
            document_key=document.document_key,
            uploaded_at=document.uploaded_at,
            signed_at=document.signed_at,
            signers=[SignerResponse.from_signer(s) for s in document.signers],
        )


class DocumentListResponse(CamelModel):
    documents: list[DocumentResponse]


class UploadDocumentResponse(CamelModel):
    document_id: UUID
    name: str
    status: str


class BatchDeleteRequest(CamelModel):
    document_ids: list[UUID]


class BatchDeleteFailure(CamelModel):
    id: UUID
    error: str


class BatchDeleteResults(CamelModel):
    success: list[UUID]
    failed: list[BatchDeleteFailure]


class BatchDeleteResponse(CamelModel):
    success: bool
    deleted: int
    failed: int
    results: BatchDeleteResults
    message: str


class EventResponse(CamelModel):
    id: str
    type: str
    name: str
    created_at: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_event(cls, event: ProviderEvent) -> "EventResponse":
        return cls(
            id=event.id,
            type=event.type,
            name=event.name,
            created_at=event.created_at,
            metadata=event.metadata,
        )


class EventListResponse(CamelModel):
    events: list[EventResponse]
    count: int
    type: str


class RequirementResponse(CamelModel):
    id: str
    action: str
    role: str | None = None
    auth: str | None = None
    document_id: str | None = None
    signer_id: str | None = None

    @classmethod
    def from_requirement(cls, requirement: ProviderRequirement) -> "RequirementResponse":
        return cls(
            id=requirement.id,
            action=requirement.action,
            role=requirement.role,
            auth=requirement.auth,
            document_id=requirement.document_id,
            signer_id=requirement.signer_id,
        )


class RequirementListResponse(CamelModel):
    requirements: list[RequirementResponse]
    count: int


class SignRequest(CamelModel):
    reason: str | None = None
    location: str | None = None


class SignResponse(CamelModel):
    success: bool
    status: str
    message: str


class PrepareSendResponse(CamelModel):
    success: bool = True
    status: str
    message: str


class SignerCreateRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    document_number: str | None = None
    document_type: str | None = None
    phone_number: str | None = None
    identification: str | None = None
    signature_type: str | None = None
    order: int | None = None
    certificate_id: UUID | None = None


class SignerUpdateRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    document_number: str | None = None
    document_type: str | None = None
    phone_number: str | None = None
    identification: str | None = None
    signature_type: str | None = None
    order: int | None = None


class SignerBatchRequest(CamelModel):
    signers: list[SignerCreateRequest] = Field(default_factory=list)


class BatchSignerErrorResponse(CamelModel):
    index: int
    name: str
    error: str


class SignerBatchPartialResponse(CamelModel):
    success: bool = True
    partial: bool = True
    created: int
    failed: int
    errors: list[BatchSignerErrorResponse]
    signers: list[SignerResponse]


class SignerBatchResponse(CamelModel):
    success: bool = True
    count: int
    signers: list[SignerResponse]
    document_status: str | None = None
    total_signers: int
