"""Ports for password hashing, password encryption and file inspection."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from signflow.domain.models.certificate import PersonType


class PasswordHasherProtocol(Protocol):
    """One-way hashing of login passwords."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...


class PasswordCipherProtocol(Protocol):
    """Reversible encryption of stored certificate passwords."""

    def encrypt(self, password: str) -> str: ...

    def decrypt(self, encrypted: str) -> str: ...


class CertificateDetailsProtocol(Protocol):
    issued_by: str
    serial_number: str
    valid_from: datetime
    valid_to: datetime
    cpf_cnpj: str


class CertificateReaderProtocol(Protocol):
    """Reads PKCS#12 bundles."""

    def read(
        self, data: bytes, password: str, kind: PersonType
    ) -> CertificateDetailsProtocol:
        """Extract certificate metadata.

        Raises:
            CertificatePasswordError: If the bundle cannot be opened.
        """
        ...

    def verify_password(self, data: bytes, password: str) -> bool: ...


class PageCounterProtocol(Protocol):
    """Counts PDF pages."""

    def count_pages(self, data: bytes) -> int: ...
