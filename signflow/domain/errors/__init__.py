"""Domain errors for SignFlow.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from SignflowError.
"""

from signflow.domain.errors.certificate import (
    CertificateError,
    CertificateNotUsableError,
    CertificateParseError,
    CertificatePasswordError,
    PasswordEncryptionError,
)
from signflow.domain.errors.common import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from signflow.domain.errors.provider import (
    SigningProviderError,
    SigningProviderNotConfiguredError,
)

__all__: list[str] = [
    "AuthenticationError",
    "CertificateError",
    "CertificateNotUsableError",
    "CertificateParseError",
    "CertificatePasswordError",
    "ConflictError",
    "NotFoundError",
    "PasswordEncryptionError",
    "PermissionDeniedError",
    "SigningProviderError",
    "SigningProviderNotConfiguredError",
    "ValidationError",
]
