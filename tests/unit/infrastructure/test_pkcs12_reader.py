"""Unit tests for PKCS#12 certificate inspection."""

from datetime import datetime, timezone

import pytest

from signflow.domain.errors import CertificatePasswordError
from signflow.domain.models.certificate import PersonType
from signflow.infrastructure.crypto.pkcs12_reader import (
    UNKNOWN_ISSUER,
    Pkcs12CertificateReader,
)
from tests.helpers import make_pkcs12


class TestPkcs12CertificateReader:
    def test_reads_metadata(self) -> None:
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        data = make_pkcs12(
            password="pw", serial_number=0xBEEF, valid_days=365, not_before=start
        )

        details = Pkcs12CertificateReader().read(data, "pw", PersonType.PF)

        assert details.issued_by == "AC Teste v5"
        assert details.serial_number == "beef"
        assert details.subject_cn == "FULANO DE TAL:52998224725"
        assert details.cpf_cnpj == "52998224725"
        assert details.valid_from == start
        assert details.valid_to.year == 2027
        assert details.valid_to.tzinfo is not None

    def test_tax_id_from_common_name_when_no_serial_attribute(self) -> None:
        data = make_pkcs12(password="pw", tax_id=None, common_name="EMPRESA:11222333000181")

        details = Pkcs12CertificateReader().read(data, "pw", PersonType.PJ)

        assert details.cpf_cnpj == "11222333000181"

    def test_placeholder_when_no_tax_id(self) -> None:
        data = make_pkcs12(password="pw", tax_id=None, common_name="Sem documento")

        assert Pkcs12CertificateReader().read(data, "pw", PersonType.PF).cpf_cnpj == (
            "000.000.000-00"
        )
        assert Pkcs12CertificateReader().read(data, "pw", PersonType.PJ).cpf_cnpj == (
            "00.000.000/0000-00"
        )

    def test_wrong_password(self) -> None:
        data = make_pkcs12(password="right")
        with pytest.raises(CertificatePasswordError):
            Pkcs12CertificateReader().read(data, "wrong", PersonType.PF)

    def test_garbage_file(self) -> None:
        with pytest.raises(CertificatePasswordError):
            Pkcs12CertificateReader().open(b"not a pfx", "pw")

    def test_verify_password(self) -> None:
        data = make_pkcs12(password="right")
        reader = Pkcs12CertificateReader()
        assert reader.verify_password(data, "right") is True
        assert reader.verify_password(data, "wrong") is False

    def test_unknown_issuer_constant(self) -> None:
        assert UNKNOWN_ISSUER == "Unknown"
