"""Test helpers for Signflow tests.

Helpers:
    make_pkcs12: Build a real PKCS#12 bundle with cryptography
    make_pdf: Build a real PDF with pypdf
    make_user / make_document / make_signer / make_certificate: Domain factories
    Harness: Every service wired to in-memory stubs

Usage:
    from tests.helpers import Harness, make_user
"""

from tests.helpers.certificates import make_pkcs12
from tests.helpers.factories import (
    ADMIN_PASSWORD,
    VALID_CNPJ,
    VALID_CPF,
    make_certificate,
    make_document,
    make_signer,
    make_user,
)
from tests.helpers.harness import Harness, no_sleep
from tests.helpers.pdf import make_pdf

__all__ = [
    "ADMIN_PASSWORD",
    "Harness",
    "VALID_CNPJ",
    "VALID_CPF",
    "make_certificate",
    "make_document",
    "make_pdf",
    "make_pkcs12",
    "make_signer",
    "make_user",
    "no_sleep",
]
