"""Document routes: PDF upload, provider views, download and signing."""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile

from signflow.api.auth.session_auth import CurrentUser, carry_cookies
from signflow.api.dependencies import client_ip, get_document_service
from signflow.api.errors import to_http_exception
from signflow.api.files import file_response, read_upload
from signflow.api.models.auth import SuccessResponse
from signflow.api.models.documents import (
    BatchDeleteFailure,
    BatchDeleteRequest,
    BatchDeleteResponse,
    BatchDeleteResults,
    DocumentListResponse,
    DocumentResponse,
    EventListResponse,
    EventResponse,
    PrepareSendResponse,
    RequirementListResponse,
    RequirementResponse,
    SignRequest,
    SignResponse,
    UploadDocumentResponse,
)
from signflow.application.services.document_service import DocumentService
from signflow.domain.exceptions import SignflowError

router = APIRouter(prefix="/v1/documents", tags=["documents"])

DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    request: Request, user: CurrentUser, service: DocumentServiceDep
) -> DocumentListResponse:
    """List documents, newest first, synchronised with the signing provider."""
    try:
        documents = await service.list(user)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return DocumentListResponse(documents=[DocumentResponse.from_document(d) for d in documents])


@router.post("", response_model=UploadDocumentResponse, status_code=201)
async def upload_document(
    request: Request,
    user: CurrentUser,
    service: DocumentServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
    name: Annotated[str | None, Form()] = None,
) -> UploadDocumentResponse:
    """Upload a PDF and register it with the signing provider.

    Raises:
        HTTPException 400: Missing file or name, not a PDF, or too large.
        HTTPException 502: The provider rejected the envelope or document.
    """
    try:
        document = await service.upload(
            user, await read_upload(file), name, ip=client_ip(request)
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return UploadDocumentResponse(
        document_id=document.id, name=document.name, status=document.status.value
    )


@router.post("/batch-delete", response_model=BatchDeleteResponse)
async def batch_delete_documents(
    body: BatchDeleteRequest, request: Request, user: CurrentUser, service: DocumentServiceDep
) -> BatchDeleteResponse:
    try:
        result = await service.batch_delete(user, body.document_ids, ip=client_ip(request))
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return BatchDeleteResponse(
        success=True,
        deleted=len(result.deleted),
        failed=len(result.failed),
        results=BatchDeleteResults(
            success=result.deleted,
            failed=[BatchDeleteFailure(id=i, error=err) for i, err in result.failed],
        ),
        message=result.message,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID, request: Request, user: CurrentUser, service: DocumentServiceDep
) -> DocumentResponse:
    try:
        document = await service.get(user, document_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return DocumentResponse.from_document(document, with_hashes=True)


@router.delete("/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: UUID, request: Request, user: CurrentUser, service: DocumentServiceDep
) -> SuccessResponse:
    try:
        await service.delete(user, document_id, ip=client_ip(request))
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return SuccessResponse(message="Document deleted")


@router.get("/{document_id}/file")
async def get_document_file(
    document_id: UUID,
    request: Request,
    response: Response,
    user: CurrentUser,
    service: DocumentServiceDep,
) -> Response:
    """Stream the signed PDF when available, else the original, for viewing."""
    try:
        content = await service.get_file(user, document_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return carry_cookies(response, file_response(content, "inline"))


@router.get("/{document_id}/download")
async def download_signed_document(
    document_id: UUID,
    request: Request,
    response: Response,
    user: CurrentUser,
    service: DocumentServiceDep,
) -> Response:
    """Download the signed PDF from the signing provider.

    Raises:
        HTTPException 409: The provider has not published a signed file yet.
        HTTPException 502: Downloading from the provider failed.
    """
    try:
        content = await service.download_signed(user, document_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return carry_cookies(response, file_response(content))


@router.get("/{document_id}/events", response_model=EventListResponse)
async def list_document_events(
    document_id: UUID,
    request: Request,
    user: CurrentUser,
    service: DocumentServiceDep,
    source: Annotated[Literal["document", "envelope"], Query(alias="type")] = "envelope",
) -> EventListResponse:
    try:
        events = await service.events(user, document_id, source)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return EventListResponse(
        events=[EventResponse.from_event(ev) for ev in events],
        count=len(events),
        type=source,
    )


@router.get("/{document_id}/requirements", response_model=RequirementListResponse)
async def list_document_requirements(
    document_id: UUID, request: Request, user: CurrentUser, service: DocumentServiceDep
) -> RequirementListResponse:
    try:
        requirements = await service.requirements(user, document_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return RequirementListResponse(
        requirements=[RequirementResponse.from_requirement(r) for r in requirements],
        count=len(requirements),
    )


@router.post("/{document_id}/prepare-send", response_model=PrepareSendResponse)
async def prepare_send_document(
    document_id: UUID, request: Request, user: CurrentUser, service: DocumentServiceDep
) -> PrepareSendResponse:
    """Activate the envelope so signers are notified."""
    try:
        document = await service.prepare_send(user, document_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return PrepareSendResponse(
        status=document.status.value, message="Document sent for signature"
    )


@router.post("/{document_id}/sign", response_model=SignResponse)
async def sign_document(
    document_id: UUID,
    body: SignRequest,
    request: Request,
    user: CurrentUser,
    service: DocumentServiceDep,
) -> SignResponse:
    """Sign with the certificates linked to each signer.

    Raises:
        HTTPException 400: Missing reason or location, no signers, or a
            signer without a certificate.
        HTTPException 502: The provider rejected the activation.
    """
    try:
        outcome = await service.sign(
            user, document_id, body.reason, body.location, ip=client_ip(request)
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="documents") from None
    return SignResponse(success=True, status=outcome.status.value, message=outcome.message)
