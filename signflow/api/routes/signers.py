"""Signer routes nested under a document."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from signflow.api.auth.session_auth import CurrentUser, carry_cookies
from signflow.api.dependencies import client_ip, get_signer_service
from signflow.api.errors import problem, to_http_exception
from signflow.api.models.auth import SuccessResponse
from signflow.api.models.documents import (
    BatchSignerErrorResponse,
    SignerBatchPartialResponse,
    SignerBatchRequest,
    SignerBatchResponse,
    SignerCreateRequest,
    SignerResponse,
    SignerUpdateRequest,
)
from signflow.application.services.signer_service import (
    BatchSignersError,
    SignerChanges,
    SignerRequest,
    SignerService,
)
from signflow.domain.exceptions import SignflowError

router = APIRouter(prefix="/v1/documents/{document_id}/signers", tags=["signers"])

SignerServiceDep = Annotated[SignerService, Depends(get_signer_service)]


def _to_request(body: SignerCreateRequest) -> SignerRequest:
    return SignerRequest(
        name=body.name,
        email=body.email,
        document_number=body.document_number,
        document_type=body.document_type,
        phone_number=body.phone_number,
        identification=body.identification,
        order=body.order,
        signature_type=body.signature_type,
        certificate_id=body.certificate_id,
    )


@router.post("", response_model=SignerResponse, status_code=201)
async def add_signer(
    document_id: UUID,
    body: SignerCreateRequest,
    request: Request,
    user: CurrentUser,
    service: SignerServiceDep,
) -> SignerResponse:
    """Add a signer at the provider and to the document.

    Raises:
        HTTPException 400: Invalid name, email or CPF/CNPJ.
        HTTPException 502: The provider rejected the signer.
    """
    try:
        signer = await service.add(user, document_id, _to_request(body), ip=client_ip(request))
    except SignflowError as e:
        raise to_http_exception(e, request, area="signers") from None
    return SignerResponse.from_signer(signer)


@router.post(
    "/batch",
    response_model=SignerBatchResponse,
    responses={207: {"model": SignerBatchPartialResponse}},
)
async def add_signers_batch(
    document_id: UUID,
    body: SignerBatchRequest,
    request: Request,
    response: Response,
    user: CurrentUser,
    service: SignerServiceDep,
) -> SignerBatchResponse | JSONResponse:
    """Add several signers; answers 207 when only some of them were created."""
    try:
        result = await service.add_batch(
            user, document_id, [_to_request(s) for s in body.signers], ip=client_ip(request)
        )
    except BatchSignersError as e:
        raise problem(
            request,
            400,
            "signers",
            "batch-failed",
            "Bad Request",
            e.message,
            created=0,
            failed=len(e.errors),
            errors=[
                {"index": err.index, "name": err.name, "error": err.error} for err in e.errors
            ],
        ) from None
    except SignflowError as e:
        raise to_http_exception(e, request, area="signers") from None

    signers = [SignerResponse.from_signer(s) for s in result.created]
    if result.partial:
        partial = SignerBatchPartialResponse(
            created=len(result.created),
            failed=len(result.errors),
            errors=[
                BatchSignerErrorResponse(index=err.index, name=err.name, error=err.error)
                for err in result.errors
            ],
            signers=signers,
        )
        return carry_cookies(
            response,
            JSONResponse(status_code=207, content=partial.model_dump(mode="json", by_alias=True)),
        )

    document = result.document
    return SignerBatchResponse(
        count=len(signers),
        signers=signers,
        document_status=document.status.value if document else None,
        total_signers=len(document.signers) if document else len(signers),
    )


@router.patch("/{signer_id}", response_model=SignerResponse)
async def update_signer(
    document_id: UUID,
    signer_id: UUID,
    body: SignerUpdateRequest,
    request: Request,
    user: CurrentUser,
    service: SignerServiceDep,
) -> SignerResponse:
    changes = SignerChanges(**body.model_dump())
    try:
        signer = await service.update(user, document_id, signer_id, changes)
    except SignflowError as e:
        raise to_http_exception(e, request, area="signers") from None
    return SignerResponse.from_signer(signer)


@router.delete("/{signer_id}", response_model=SuccessResponse)
async def remove_signer(
    document_id: UUID,
    signer_id: UUID,
    request: Request,
    user: CurrentUser,
    service: SignerServiceDep,
) -> SuccessResponse:
    """Remove a signer who has not signed yet."""
    try:
        await service.remove(user, document_id, signer_id, ip=client_ip(request))
    except SignflowError as e:
        raise to_http_exception(e, request, area="signers") from None
    return SuccessResponse(message="Signer removed")
