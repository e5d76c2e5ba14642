"""Services wired to in-memory stubs."""

from collections.abc import Callable
from datetime import datetime, timezone

from signflow.application.services.audit_service import AuditService
from signflow.application.services.auth_service import AuthService
from signflow.application.services.certificate_service import CertificateService
from signflow.application.services.dashboard_service import DashboardService
from signflow.application.services.document_service import DocumentService
from signflow.application.services.signer_service import SignerRequest, SignerService
from signflow.application.services.signing_workflow_service import (
    SigningWorkflowService,
)
from signflow.application.services.uploads import UploadedFile
from signflow.application.services.user_admin_service import UserAdminService
from signflow.config.settings import ClicksignConfig
from signflow.domain.models.document import Document, Signer
from signflow.domain.models.user import User
from signflow.infrastructure.crypto.certificate_password import AesGcmPasswordCipher
from signflow.infrastructure.crypto.password_hasher import BcryptPasswordHasher
from signflow.infrastructure.crypto.pkcs12_reader import Pkcs12CertificateReader
from signflow.infrastructure.pdf.page_counter import PypdfPageCounter
from signflow.infrastructure.stubs import (
    AuditRepositoryStub,
    BlobStorageStub,
    CertificateRepositoryStub,
    DocumentRepositoryStub,
    SessionRepositoryStub,
    SigningProviderStub,
    UserRepositoryStub,
)
from tests.helpers.factories import VALID_CPF
from tests.helpers.pdf import make_pdf

TEST_PASSWORD_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


async def no_sleep(_seconds: float) -> None:
    return None


class Harness:
    """Every service wired to stubs, with the stubs exposed for assertions."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.sleeps: list[float] = []

        async def sleep(seconds: float) -> None:
            self.sleeps.append(seconds)

        self.users = UserRepositoryStub()
        self.sessions = SessionRepositoryStub()
        self.certificates = CertificateRepositoryStub()
        self.documents = DocumentRepositoryStub()
        self.audit_log = AuditRepositoryStub()
        self.storage = BlobStorageStub()
        self.provider = SigningProviderStub()
        self.config = ClicksignConfig(
            access_token="test-token",
            document_check_interval=0.0,
            document_check_retries=2,
            requirement_retry_delay=0.0,
            requirement_retries=3,
        )
        self.hasher = BcryptPasswordHasher(rounds=4)
        self.cipher = AesGcmPasswordCipher(TEST_PASSWORD_KEY)

        self.audit = AuditService(self.audit_log)
        self.auth = AuthService(self.users, self.sessions, self.hasher)
        self.user_admin = UserAdminService(self.users, self.sessions, self.hasher)
        self.certificate_service = CertificateService(
            self.certificates,
            self.storage,
            Pkcs12CertificateReader(),
            self.cipher,
            self.audit,
        )
        self.workflow = SigningWorkflowService(
            self.provider, self.certificates, self.config, sleep=sleep
        )
        self.document_service = DocumentService(
            self.documents,
            self.storage,
            PypdfPageCounter(),
            self.workflow,
            self.provider,
            self.audit,
            sleep=sleep,
        )
        self.signer_service = SignerService(
            self.documents,
            self.document_service,
            self.workflow,
            self.provider,
            self.audit,
        )
        self.dashboard = DashboardService(
            self.certificates,
            self.documents,
            self.audit,
            clock=clock or (lambda: datetime.now(timezone.utc)),
        )

    async def upload(self, user: User, name: str = "Contrato", pages: int = 1) -> Document:
        """Upload a real PDF through DocumentService."""
        return await self.document_service.upload(
            user,
            UploadedFile("contrato.pdf", make_pdf(pages), "application/pdf"),
            name,
        )

    async def add_signer(
        self, user: User, document: Document, name: str = "Joao Souza", **fields: object
    ) -> Signer:
        values: dict[str, object] = {
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com",
            "document_number": VALID_CPF,
            "document_type": "PF",
            "phone_number": "+5511999999999",
            "identification": "Diretor",
        }
        values.update(fields)
        return await self.signer_service.add(
            user, document.id, SignerRequest(**values)  # type: ignore[arg-type]
        )
