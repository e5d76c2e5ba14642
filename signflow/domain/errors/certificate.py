"""Certificate domain errors.

Covers PKCS#12 parsing, certificate password handling and the usability
checks applied before a certificate may back a signer.
"""

from __future__ import annotations

from signflow.domain.exceptions import SignflowError


class CertificateError(SignflowError):
    """Base error for certificate operations."""


class CertificateParseError(CertificateError):
    """Raised when a PKCS#12 file cannot be read."""


class CertificatePasswordError(CertificateError):
    """Raised when a PKCS#12 file cannot be opened with the given password."""

    def __init__(self, message: str = "Invalid certificate password") -> None:
        super().__init__(message)


class CertificateNotUsableError(CertificateError):
    """Raised when a certificate is inactive, expired or not owned by the user."""


class PasswordEncryptionError(CertificateError):
    """Raised when a certificate password cannot be encrypted or decrypted."""
