"""Document service: PDF upload, provider synchronisation and signing.

Every document owns one provider envelope holding one provider
document. Local status is re-derived from the provider's view whenever
a document is read; synchronisation failures are logged and the stored
state is returned instead.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.blob_storage import BlobStorageProtocol
from signflow.application.ports.crypto import PageCounterProtocol
from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.application.services.access import ensure_owner_or_admin
from signflow.application.services.audit_service import AuditService
from signflow.application.services.base import LoggingMixin
from signflow.application.services.signing_workflow_service import (
    SigningWorkflowService,
)
from signflow.application.services.uploads import FileContent, UploadedFile
from signflow.domain.errors import (
    ConflictError,
    NotFoundError,
    SigningProviderError,
    ValidationError,
)
from signflow.domain.exceptions import SignflowError
from signflow.domain.models.audit import AuditAction
from signflow.domain.models.document import Document, DocumentStatus, Signer, SignerStatus
from signflow.domain.models.provider import (
    ProviderEvent,
    ProviderRequirement,
)
from signflow.domain.models.user import User
from signflow.domain.services.provider_status import (
    derive_document_status,
    is_signed_or_closed,
    map_signer_status,
)
from signflow.infrastructure.monitoring.metrics import get_metrics_collector

PDF_CONTENT_TYPE = "application/pdf"
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024
SIGNED_URL_ATTEMPTS = 4
SIGNED_URL_RETRY_DELAY = 1.5
SIGN_STATUS_CHECK_DELAY = 2.0
EVENT_SOURCES = ("document", "envelope")

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\- ]+", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def safe_base_name(file_name: str) -> str:
    """File name without ``.pdf`` and with header-unsafe characters replaced."""
    name = (file_name or "document.pdf").strip()
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    name = _WHITESPACE.sub(" ", _UNSAFE_NAME_CHARS.sub("_", name)).strip()
    return name or "document"


def parse_provider_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class BatchDeleteResult:
    deleted: list[UUID] = field(default_factory=list)
    failed: list[tuple[UUID, str]] = field(default_factory=list)

    @property
    def message(self) -> str:
        text = f"{len(self.deleted)} document(s) deleted successfully"
        if self.failed:
            return f"{text}. {len(self.failed)} failure(s)."
        return f"{text}."


@dataclass(frozen=True)
class SignOutcome:
    status: DocumentStatus
    message: str


class DocumentService(LoggingMixin):
    """Documents and their provider lifecycle."""

    def __init__(
        self,
        documents: DocumentRepositoryProtocol,
        storage: BlobStorageProtocol,
        page_counter: PageCounterProtocol,
        workflow: SigningWorkflowService,
        provider: SigningProviderProtocol,
        audit: AuditService,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._documents = documents
        self._storage = storage
        self._page_counter = page_counter
        self._workflow = workflow
        self._provider = provider
        self._audit = audit
        self._sleep = sleep
        self._init_logger(component="documents")

    # ------------------------------------------------------------------
    # Loading and synchronisation
    # ------------------------------------------------------------------

    async def load(self, user: User, document_id: UUID) -> Document:
        """Fetch a document the user may access, without provider sync."""
        document = await self._documents.get(document_id)
        if document is None:
            raise NotFoundError("document", document_id)
        ensure_owner_or_admin(user, document.user_id, "document")
        return document

    async def sync(self, document: Document) -> Document:
        """Pull envelope, document, signer and requirement state from the provider.

        Local signers are matched to provider signers by provider key or,
        failing that, by email. Provider signers with no local match are
        not imported.

        Raises:
            SigningProviderError: If any provider read fails.
        """
        if not (document.envelope_key and document.document_key):
            return document

        envelope = await self._provider.get_envelope(document.envelope_key)
        provider_document = await self._provider.get_document(
            document.envelope_key, document.document_key
        )
        provider_signers = await self._provider.get_signers(document.envelope_key)
        requirements = await self._provider.get_requirements(document.envelope_key)

        by_signer: dict[str, list[ProviderRequirement]] = {}
        for requirement in requirements:
            if requirement.signer_id:
                by_signer.setdefault(requirement.signer_id, []).append(requirement)

        signers = {s.id: s for s in document.signers}
        for provider_signer in provider_signers:
            local = next(
                (
                    s
                    for s in signers.values()
                    if s.provider_signer_key == provider_signer.id
                    or s.email.lower() == provider_signer.email.lower()
                ),
                None,
            )
            if local is None:
                continue
            signer_requirements = by_signer.get(provider_signer.id, [])
            auth = next((r for r in signer_requirements if r.action == "provide_evidence"), None)
            agree = next((r for r in signer_requirements if r.action == "agree"), None)
            synced = replace(
                local,
                name=provider_signer.name,
                email=provider_signer.email,
                phone_number=provider_signer.phone_number or local.phone_number,
                status=map_signer_status(provider_signer.status),
                provider_signer_key=provider_signer.id,
                provider_requirement_key=(
                    (auth or agree).id if (auth or agree) else local.provider_requirement_key
                ),
            )
            if synced != local:
                signers[local.id] = await self._documents.update_signer(synced)

        ordered = tuple(sorted(signers.values(), key=lambda s: s.order))
        status = derive_document_status(
            envelope.status,
            provider_document.status,
            [s.status for s in ordered],
            document.status,
        )
        signed_at = parse_provider_timestamp(provider_document.finished_at) or document.signed_at
        if status != document.status or signed_at != document.signed_at:
            await self._documents.update(
                replace(document, status=status, signed_at=signed_at)
            )
        return replace(document, status=status, signed_at=signed_at, signers=ordered)

    async def _sync_quietly(self, document: Document) -> Document:
        try:
            return await self.sync(document)
        except SigningProviderError as e:
            self._log_operation("sync", document_id=str(document.id)).warning(
                "document_sync_failed", error=e.message, status_code=e.status_code
            )
            return document

    async def list(self, user: User) -> list[Document]:
        """List the user's documents (every document for admins), synced."""
        documents = await self._documents.list(None if user.is_admin else user.id)
        return list(await asyncio.gather(*(self._sync_quietly(d) for d in documents)))

    async def get(self, user: User, document_id: UUID) -> Document:
        return await self._sync_quietly(await self.load(user, document_id))

    # ------------------------------------------------------------------
    # Upload and deletion
    # ------------------------------------------------------------------

    async def upload(
        self,
        user: User,
        file: UploadedFile | None,
        name: str | None,
        ip: str | None = None,
    ) -> Document:
        """Create the provider envelope and document, then store the PDF.

        Raises:
            ValidationError: If the file is missing, not a PDF or too large,
                or the name is empty.
            SigningProviderError: If the provider rejects the upload.
        """
        if file is None or not file.data:
            raise ValidationError("No file provided", field="file")
        if not name or not name.strip():
            raise ValidationError("Document name is required", field="name")
        if file.content_type != PDF_CONTENT_TYPE:
            raise ValidationError("Only PDF files are allowed", field="file")
        if file.size > MAX_DOCUMENT_SIZE:
            raise ValidationError(
                f"File too large. Maximum size: {MAX_DOCUMENT_SIZE // (1024 * 1024)}MB",
                field="file",
            )

        name = name.strip()
        log = self._log_operation("upload_document", user_id=str(user.id))
        page_count = self._page_counter.count_pages(file.data)
        content_base64 = (
            f"data:{PDF_CONTENT_TYPE};base64,{base64.b64encode(file.data).decode('ascii')}"
        )

        envelope = await self._workflow.create_envelope(name)
        provider_document_id = await self._workflow.upload_document(
            envelope.envelope_id, file.file_name, content_base64
        )

        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        blob_path = await self._storage.save(
            f"documents/{user.id}/{timestamp}-{file.safe_name}", file.data
        )
        document = Document(
            id=uuid7(),
            user_id=user.id,
            name=name,
            file_name=file.file_name,
            file_size=file.size,
            page_count=page_count,
            hash=hashlib.sha256(file.data).hexdigest(),
            status=DocumentStatus.PENDING,
            envelope_key=envelope.envelope_id,
            document_key=provider_document_id,
            blob_path=blob_path,
        )
        try:
            document = await self._documents.create(document)
        except Exception:
            await self._storage.delete(blob_path)
            raise

        await self._audit.record(
            user,
            AuditAction.UPLOAD,
            ip=ip,
            document_id=document.id,
            document_name=document.name,
            details={"file_name": document.file_name, "file_size": document.file_size},
        )
        get_metrics_collector().record_workflow_event("document_uploaded")
        log.info(
            "document_uploaded",
            document_id=str(document.id),
            envelope_id=envelope.envelope_id,
            page_count=page_count,
        )
        return document

    async def _delete_at_provider(
        self, document: Document, delete_envelope: bool
    ) -> None:
        if not (document.envelope_key and document.document_key):
            return
        log = self._log_operation(
            "delete_at_provider",
            document_id=str(document.id),
            envelope_id=document.envelope_key,
        )
        try:
            await self._provider.delete_document(document.envelope_key, document.document_key)
        except SigningProviderError as e:
            log.warning("provider_document_delete_failed", error=e.message)
            return
        if not delete_envelope:
            return
        try:
            await self._provider.delete_envelope(document.envelope_key)
        except SigningProviderError as e:
            log.warning("provider_envelope_delete_failed", error=e.message)

    async def _delete_locally(self, document: Document) -> None:
        await self._documents.delete(document.id)
        if document.blob_path and not await self._storage.delete(document.blob_path):
            self._log_operation("delete", document_id=str(document.id)).warning(
                "document_blob_missing"
            )

    async def delete(self, user: User, document_id: UUID, ip: str | None = None) -> None:
        """Delete a document at the provider (best effort) and locally.

        The envelope is deleted too unless another document references it.
        """
        document = await self.load(user, document_id)
        others = 0
        if document.envelope_key:
            others = await self._documents.count_by_envelope(
                document.envelope_key, exclude_document_id=document.id
            )
        await self._delete_at_provider(document, delete_envelope=others == 0)
        await self._delete_locally(document)
        await self._audit.record(
            user,
            AuditAction.DELETE,
            ip=ip,
            document_id=document.id,
            document_name=document.name,
        )
        self._log_operation("delete", document_id=str(document_id)).info("document_deleted")

    async def batch_delete(
        self, user: User, document_ids: Sequence[UUID], ip: str | None = None
    ) -> BatchDeleteResult:
        """Delete several documents; non-admins only reach their own.

        Raises:
            ValidationError: If no ids are given.
            NotFoundError: If none of the ids matched a deletable document.
        """
        if not document_ids:
            raise ValidationError("A list of document ids is required", field="documentIds")
        documents = await self._documents.get_many(
            document_ids, None if user.is_admin else user.id
        )
        if not documents:
            raise NotFoundError("documents", ", ".join(str(i) for i in document_ids))

        batch_ids = {d.id for d in documents}
        per_envelope: dict[str, int] = {}
        for document in documents:
            if document.envelope_key:
                per_envelope[document.envelope_key] = per_envelope.get(document.envelope_key, 0) + 1
        envelopes_to_delete: set[str] = set()
        for envelope_key, in_batch in per_envelope.items():
            total = await self._documents.count_by_envelope(envelope_key)
            if in_batch == 1 and total == in_batch:
                envelopes_to_delete.add(envelope_key)

        log = self._log_operation("batch_delete", user_id=str(user.id))
        deleted: list[UUID] = []
        failed: list[tuple[UUID, str]] = []
        for document in documents:
            try:
                await self._delete_at_provider(
                    document, delete_envelope=document.envelope_key in envelopes_to_delete
                )
                await self._delete_locally(document)
            except Exception as e:
                # One failing document must not abort the rest of the batch
                message = e.message if isinstance(e, SignflowError) else str(e)
                log.warning(
                    "batch_delete_item_failed",
                    document_id=str(document.id),
                    error_type=type(e).__name__,
                    error=message,
                )
                failed.append((document.id, message or "Unknown error"))
                continue
            deleted.append(document.id)
            await self._audit.record(
                user,
                AuditAction.DELETE,
                ip=ip,
                document_id=document.id,
                document_name=document.name,
                details={"batch": True},
            )

        log.info(
            "documents_batch_deleted",
            requested=len(document_ids),
            matched=len(batch_ids),
            deleted=len(deleted),
            failed=len(failed),
        )
        return BatchDeleteResult(deleted=deleted, failed=failed)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def get_file(self, user: User, document_id: UUID) -> FileContent:
        """Return the signed PDF when available, else the original.

        The provider copy is preferred; the stored upload is the fallback.

        Raises:
            NotFoundError: If no copy of the PDF is available.
        """
        document = await self.load(user, document_id)
        log = self._log_operation("get_file", document_id=str(document_id))

        if document.document_key:
            try:
                status = await self._provider.get_document_status(
                    document.document_key, document.envelope_key
                )
                url = status.signed_url or status.original_url
                if url:
                    data = await self._provider.download(url)
                    return FileContent(data, document.file_name, PDF_CONTENT_TYPE)
            except SigningProviderError as e:
                log.warning("provider_file_unavailable", error=e.message)

        if document.blob_path:
            try:
                data = await self._storage.load(document.blob_path)
            except NotFoundError:
                log.warning("document_blob_missing")
            else:
                return FileContent(data, document.file_name, PDF_CONTENT_TYPE)

        raise NotFoundError("document file", document_id)

    async def _signed_url(self, envelope_key: str, document_key: str) -> str:
        for attempt in range(SIGNED_URL_ATTEMPTS):
            if attempt > 0:
                await self._sleep(SIGNED_URL_RETRY_DELAY)
            provider_document = await self._provider.get_document(envelope_key, document_key)
            if provider_document.status and not is_signed_or_closed(provider_document.status):
                raise ValidationError(
                    "Document is not ready for download yet. "
                    f"Current status: {provider_document.status}."
                )
            if provider_document.signed_url:
                return provider_document.signed_url
        raise ConflictError("Download URL is not available yet. Try again shortly.")

    async def download_signed(self, user: User, document_id: UUID) -> FileContent:
        """Download the signed PDF from the provider.

        The signed URL is re-read once if the first download fails.

        Raises:
            ValidationError: If the document is not at the provider, not
                finished yet, or the provider could not be read.
            ConflictError: If the provider has not published a signed URL.
            SigningProviderError: If downloading fails twice.
        """
        document = await self.load(user, document_id)
        envelope_key, document_key = document.envelope_key, document.document_key
        if not (envelope_key and document_key):
            raise ValidationError("Document is not configured at the signing provider")
        log = self._log_operation("download_signed", document_id=str(document_id))

        try:
            signed_url = await self._signed_url(envelope_key, document_key)
        except SigningProviderError as e:
            log.warning("signed_url_read_failed", error=e.message)
            raise ValidationError(
                f"Could not read the document at the signing provider: {e.message}"
            ) from e
        try:
            data = await self._provider.download(signed_url)
        except SigningProviderError as first_error:
            log.warning("signed_download_failed", error=first_error.message)
            refreshed = await self._provider.get_document(envelope_key, document_key)
            if not refreshed.signed_url:
                raise ConflictError(
                    "Download failed and no new download URL could be obtained. Try again."
                ) from first_error
            try:
                data = await self._provider.download(refreshed.signed_url)
            except SigningProviderError as e:
                raise SigningProviderError(
                    f"Failed to download file: {e.message}", status_code=e.status_code
                ) from e

        signed_hash = hashlib.sha256(data).hexdigest()
        if signed_hash != document.signed_hash:
            await self._documents.update(replace(document, signed_hash=signed_hash))
        log.info("signed_document_downloaded", size=len(data))
        return FileContent(
            data, f"{safe_base_name(document.file_name)}_signed.pdf", PDF_CONTENT_TYPE
        )

    # ------------------------------------------------------------------
    # Provider views
    # ------------------------------------------------------------------

    async def events(
        self, user: User, document_id: UUID, source: str = "envelope"
    ) -> list[ProviderEvent]:
        if source not in EVENT_SOURCES:
            raise ValidationError("Event type must be 'document' or 'envelope'", field="type")
        document = await self.load(user, document_id)
        if not document.envelope_key:
            raise ValidationError("Document has no envelope at the signing provider")
        if source == "document":
            if not document.document_key:
                raise ValidationError("Document is not configured at the signing provider")
            return await self._workflow.get_document_events(
                document.envelope_key, document.document_key
            )
        return await self._workflow.get_envelope_events(document.envelope_key)

    async def requirements(self, user: User, document_id: UUID) -> list[ProviderRequirement]:
        document = await self.load(user, document_id)
        if not document.envelope_key:
            raise ValidationError("Document has no envelope at the signing provider")
        return await self._workflow.list_requirements(document.envelope_key)

    # ------------------------------------------------------------------
    # Sending and signing
    # ------------------------------------------------------------------

    def _provider_keys(self, document: Document) -> tuple[str, str]:
        if not (document.envelope_key and document.document_key):
            raise ValidationError("Document is not configured at the signing provider")
        if not document.signers:
            raise ValidationError("Add at least one signer before sending the document")
        return document.envelope_key, document.document_key

    async def _activate(self, document: Document, envelope_key: str) -> None:
        log = self._log_operation("activate", document_id=str(document.id))
        verified = await self._workflow.verify_all_signers_have_requirements(
            envelope_key, len(document.signers)
        )
        if not verified:
            log.warning("activating_with_missing_requirements")
        await self._workflow.activate_envelope(envelope_key)
        try:
            await self._workflow.notify(
                envelope_key, f'Document "{document.name}" is ready for signature.'
            )
        except SigningProviderError as e:
            log.warning("signer_notification_failed", error=e.message)

    async def prepare_send(self, user: User, document_id: UUID) -> Document:
        """Activate the envelope and notify signers."""
        document = await self.load(user, document_id)
        envelope_key, _ = self._provider_keys(document)
        await self._activate(document, envelope_key)
        document = await self._documents.update(
            replace(document, status=DocumentStatus.SIGNING)
        )
        get_metrics_collector().record_workflow_event("document_sent")
        self._log_operation("prepare_send", document_id=str(document_id)).info(
            "document_sent_for_signature"
        )
        return document

    async def sign(
        self,
        user: User,
        document_id: UUID,
        reason: str | None,
        location: str | None,
        ip: str | None = None,
    ) -> SignOutcome:
        """Start signing with the certificates linked to every signer.

        After activation the provider status is read once; when that read
        fails the document is recorded as signed.

        Raises:
            ValidationError: If reason or location is missing, the document
                is not at the provider, or a signer has no certificate.
            SigningProviderError: If activation fails.
        """
        if not reason or not location:
            raise ValidationError("Reason and location are required")
        document = await self.load(user, document_id)
        envelope_key, document_key = self._provider_keys(document)
        if any(s.certificate_id is None for s in document.signers):
            raise ValidationError("Every signer must have a linked certificate")

        log = self._log_operation("sign", document_id=str(document_id))
        try:
            await self._activate(document, envelope_key)
            await self._workflow.start_signature(envelope_key, document_key)
        except SigningProviderError as e:
            await self._audit.record(
                user,
                AuditAction.FAILURE,
                ip=ip,
                document_id=document.id,
                document_name=document.name,
                details={"error": e.message, "reason": reason, "location": location},
            )
            get_metrics_collector().record_workflow_event("signature_failed")
            raise

        signing = replace(document, status=DocumentStatus.SIGNING)
        await self._documents.update(signing)
        for signer in document.signers:
            await self._documents.update_signer(replace(signer, status=SignerStatus.SIGNING))

        await self._sleep(SIGN_STATUS_CHECK_DELAY)
        now = datetime.now(timezone.utc)
        try:
            provider_document = await self._provider.get_document_status(
                document_key, envelope_key
            )
        except SigningProviderError as e:
            log.warning("signature_status_check_failed", error=e.message)
            final_status, signed_at = DocumentStatus.SIGNED, now
        else:
            final_status = (
                DocumentStatus.SIGNED
                if provider_document.status in ("closed", "finalized")
                else DocumentStatus.SIGNING
            )
            signed_at = parse_provider_timestamp(provider_document.finished_at) or now
        await self._documents.update(replace(signing, status=final_status, signed_at=signed_at))

        await self._audit.record(
            user,
            AuditAction.SIGNATURE,
            ip=ip,
            document_id=document.id,
            document_name=document.name,
            details={"reason": reason, "location": location, "signers": len(document.signers)},
        )
        get_metrics_collector().record_workflow_event("document_signed")
        log.info("document_signing_started", status=final_status.value)
        reported = DocumentStatus.SIGNED if final_status == DocumentStatus.SIGNING else final_status
        return SignOutcome(status=reported, message="Document signed successfully")

    # ------------------------------------------------------------------
    # Signers
    # ------------------------------------------------------------------

    async def set_status(self, document: Document, status: DocumentStatus) -> Document:
        if document.status == status:
            return document
        return await self._documents.update(replace(document, status=status))

    async def reload(self, document_id: UUID) -> Document:
        document = await self._documents.get(document_id)
        if document is None:
            raise NotFoundError("document", document_id)
        return document


def signer_by_id(document: Document, signer_id: UUID) -> Signer:
    for signer in document.signers:
        if signer.id == signer_id:
            return signer
    raise NotFoundError("signer", signer_id)
