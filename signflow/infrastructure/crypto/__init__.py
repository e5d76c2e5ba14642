"""Cryptographic adapters: password cipher, PKCS#12 reader, bcrypt hasher."""

from signflow.infrastructure.crypto.certificate_password import (
    AesGcmPasswordCipher,
    parse_encryption_key,
)
from signflow.infrastructure.crypto.password_hasher import BcryptPasswordHasher
from signflow.infrastructure.crypto.pkcs12_reader import (
    CertificateDetails,
    Pkcs12CertificateReader,
)

__all__: list[str] = [
    "AesGcmPasswordCipher",
    "BcryptPasswordHasher",
    "CertificateDetails",
    "Pkcs12CertificateReader",
    "parse_encryption_key",
]
