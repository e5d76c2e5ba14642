"""PKCS#12 (A1 certificate) inspection with the cryptography package."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from signflow.domain.errors import CertificatePasswordError
from signflow.domain.models.certificate import PersonType
from signflow.domain.services.tax_id import placeholder_for

UNKNOWN_ISSUER = "Unknown"
_TAX_ID_IN_CN = re.compile(r"\d{11,14}")


@dataclass(frozen=True)
class CertificateDetails:
    """Metadata extracted from a PKCS#12 bundle."""

    subject_cn: str | None
    issued_by: str
    serial_number: str
    valid_from: datetime
    valid_to: datetime
    cpf_cnpj: str


def _first_attribute(name: x509.Name, oid: x509.ObjectIdentifier) -> str | None:
    attributes = name.get_attributes_for_oid(oid)
    if not attributes:
        return None
    value = attributes[0].value
    return value.decode("utf-8", "replace") if isinstance(value, bytes) else value


def _validity(cert: x509.Certificate) -> tuple[datetime, datetime]:
    # *_utc accessors exist from cryptography 42
    not_before = getattr(cert, "not_valid_before_utc", None)
    not_after = getattr(cert, "not_valid_after_utc", None)
    if not_before is None or not_after is None:
        not_before = cert.not_valid_before.replace(tzinfo=timezone.utc)
        not_after = cert.not_valid_after.replace(tzinfo=timezone.utc)
    return not_before, not_after


def extract_tax_id(subject: x509.Name, kind: PersonType) -> str:
    """Find the CPF/CNPJ in a certificate subject.

    Looks at the serialNumber attribute (OID 2.5.4.5) first, then for an
    11 to 14 digit run in the common name. Falls back to a placeholder.
    """
    serial_attr = _first_attribute(subject, NameOID.SERIAL_NUMBER)
    if serial_attr:
        digits = re.sub(r"\D", "", serial_attr)
        if digits:
            return digits
    common_name = _first_attribute(subject, NameOID.COMMON_NAME)
    if common_name:
        match = _TAX_ID_IN_CN.search(common_name)
        if match:
            return match.group(0)
    return placeholder_for(kind)


class Pkcs12CertificateReader:
    """Opens PKCS#12 bundles and reads certificate metadata."""

    def open(self, data: bytes, password: str) -> x509.Certificate:
        """Open a bundle and return its end-entity certificate.

        Raises:
            CertificatePasswordError: If the password is wrong, the file is
                malformed, or the bundle carries no certificate.
        """
        try:
            _, certificate, _ = pkcs12.load_key_and_certificates(
                data, password.encode("utf-8") if password else None
            )
        except (ValueError, TypeError) as e:
            raise CertificatePasswordError(
                "Could not open certificate. Check the password and file format."
            ) from e
        if certificate is None:
            raise CertificatePasswordError("Certificate bundle contains no certificate")
        return certificate

    def verify_password(self, data: bytes, password: str) -> bool:
        try:
            self.open(data, password)
        except CertificatePasswordError:
            return False
        return True

    def read(self, data: bytes, password: str, kind: PersonType) -> CertificateDetails:
        """Extract issuer, serial, validity and tax id from a bundle.

        Args:
            data: Raw PKCS#12 bytes.
            password: Bundle password.
            kind: PF or PJ, used to choose the tax id placeholder.

        Returns:
            CertificateDetails for the end-entity certificate.
        """
        cert = self.open(data, password)
        valid_from, valid_to = _validity(cert)
        return CertificateDetails(
            subject_cn=_first_attribute(cert.subject, NameOID.COMMON_NAME),
            issued_by=_first_attribute(cert.issuer, NameOID.COMMON_NAME) or UNKNOWN_ISSUER,
            serial_number=format(cert.serial_number, "x"),
            valid_from=valid_from,
            valid_to=valid_to,
            cpf_cnpj=extract_tax_id(cert.subject, kind),
        )
