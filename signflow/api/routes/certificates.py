"""Certificate routes: A1 (PKCS#12) upload, listing and retrieval."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile

from signflow.api.auth.session_auth import CurrentUser, carry_cookies
from signflow.api.dependencies import client_ip, get_certificate_service
from signflow.api.errors import problem, to_http_exception
from signflow.api.files import file_response, read_upload
from signflow.api.models.auth import SuccessResponse
from signflow.api.models.certificates import (
    BulkUploadResponse,
    CertificateFileRequest,
    CertificateListResponse,
    CertificatePasswordResponse,
    CertificateResponse,
    UpdateCertificateRequest,
)
from signflow.application.services.certificate_service import CertificateService
from signflow.domain.errors import CertificatePasswordError
from signflow.domain.exceptions import SignflowError

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])

CertificateServiceDep = Annotated[CertificateService, Depends(get_certificate_service)]


@router.get("", response_model=CertificateListResponse)
async def list_certificates(
    user: CurrentUser, service: CertificateServiceDep
) -> CertificateListResponse:
    """List the user's certificates, soonest expiry first."""
    certificates = await service.list_for_user(user)
    return CertificateListResponse(
        certificates=[CertificateResponse.from_certificate(c) for c in certificates]
    )


@router.post("", response_model=CertificateResponse, status_code=201)
async def upload_certificate(
    request: Request,
    user: CurrentUser,
    service: CertificateServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
    name: Annotated[str | None, Form()] = None,
    type: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
) -> CertificateResponse:
    """Upload a .pfx/.p12 certificate with its password.

    Raises:
        HTTPException 400: Missing field, bad extension, too large, or the
            bundle cannot be opened with the password.
    """
    try:
        certificate = await service.upload(
            user,
            await read_upload(file),
            name=name,
            kind=type,
            password=password,
            ip=client_ip(request),
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return CertificateResponse.from_certificate(certificate)


@router.post("/bulk", response_model=BulkUploadResponse)
async def upload_certificates_bulk(
    request: Request,
    user: CurrentUser,
    service: CertificateServiceDep,
    files: Annotated[list[UploadFile] | None, File()] = None,
    names: Annotated[list[str] | None, Form()] = None,
    types: Annotated[list[str] | None, Form()] = None,
    passwords: Annotated[list[str] | None, Form()] = None,
) -> BulkUploadResponse:
    """Upload several certificates; each one succeeds or fails on its own."""
    uploads = [upload for f in files or [] if (upload := await read_upload(f)) is not None]
    try:
        result = await service.upload_bulk(
            user,
            uploads,
            names or [],
            types or [],
            passwords or [],
            ip=client_ip(request),
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return BulkUploadResponse.from_result(result)


@router.get("/{certificate_id}", response_model=CertificateResponse)
async def get_certificate(
    certificate_id: UUID, request: Request, user: CurrentUser, service: CertificateServiceDep
) -> CertificateResponse:
    try:
        certificate = await service.get(user, certificate_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return CertificateResponse.from_certificate(certificate)


@router.patch("/{certificate_id}", response_model=CertificateResponse)
async def update_certificate(
    certificate_id: UUID,
    body: UpdateCertificateRequest,
    request: Request,
    user: CurrentUser,
    service: CertificateServiceDep,
) -> CertificateResponse:
    """Rename a certificate or change its status."""
    try:
        certificate = await service.update(
            user, certificate_id, name=body.name, status=body.status
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return CertificateResponse.from_certificate(certificate)


@router.delete("/{certificate_id}", response_model=SuccessResponse)
async def delete_certificate(
    certificate_id: UUID, request: Request, user: CurrentUser, service: CertificateServiceDep
) -> SuccessResponse:
    try:
        await service.delete(user, certificate_id, ip=client_ip(request))
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return SuccessResponse(message="Certificate deleted")


@router.get("/{certificate_id}/password", response_model=CertificatePasswordResponse)
async def get_certificate_password(
    certificate_id: UUID, request: Request, user: CurrentUser, service: CertificateServiceDep
) -> CertificatePasswordResponse:
    """Reveal the stored certificate password.

    Raises:
        HTTPException 404: No password is stored.
        HTTPException 500: The stored password cannot be decrypted.
    """
    try:
        certificate, password = await service.reveal_password(user, certificate_id)
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return CertificatePasswordResponse(
        password=password,
        certificate_id=certificate.id,
        certificate_name=certificate.name,
    )


@router.get("/{certificate_id}/file", include_in_schema=False)
async def get_certificate_file_not_allowed(certificate_id: UUID, request: Request) -> Response:
    raise problem(
        request,
        405,
        "certificates",
        "method-not-allowed",
        "Method Not Allowed",
        "Use POST with the certificate password to download the file",
        headers={"Allow": "POST"},
    )


@router.post("/{certificate_id}/file")
async def download_certificate_file(
    certificate_id: UUID,
    request: Request,
    response: Response,
    user: CurrentUser,
    service: CertificateServiceDep,
    body: CertificateFileRequest | None = None,
) -> Response:
    """Return the PKCS#12 bundle once the password has been verified.

    Raises:
        HTTPException 400: No stored password and none provided.
        HTTPException 401: The password does not open the bundle.
    """
    body = body or CertificateFileRequest()
    try:
        content = await service.download_file(
            user,
            certificate_id,
            password=body.password,
            save_password=body.save_password,
        )
    except CertificatePasswordError as e:
        raise to_http_exception(e, request, area="certificates", status_code=401) from None
    except SignflowError as e:
        raise to_http_exception(e, request, area="certificates") from None
    return carry_cookies(response, file_response(content))
