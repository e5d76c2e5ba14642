"""Unit tests for certificate validity classification."""

from datetime import datetime, timedelta, timezone

import pytest

from signflow.domain.services.certificate_validity import (
    EXPIRING_SOON_DAYS,
    ValidityStatus,
    format_file_size,
    validity_status,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestValidityStatus:
    def test_far_future_is_valid(self) -> None:
        result = validity_status(NOW + timedelta(days=90), NOW)
        assert result.status == ValidityStatus.VALID
        assert result.days_remaining == 90

    def test_thirty_days_is_expiring_soon(self) -> None:
        result = validity_status(NOW + timedelta(days=EXPIRING_SOON_DAYS), NOW)
        assert result.status == ValidityStatus.EXPIRING_SOON

    def test_thirty_one_days_is_valid(self) -> None:
        result = validity_status(NOW + timedelta(days=31), NOW)
        assert result.status == ValidityStatus.VALID

    def test_days_round_up(self) -> None:
        result = validity_status(NOW + timedelta(hours=3), NOW)
        assert result.days_remaining == 1
        assert result.status == ValidityStatus.EXPIRING_SOON

    def test_expired_earlier_today_still_counts_as_zero_days(self) -> None:
        result = validity_status(NOW - timedelta(hours=3), NOW)
        assert result.days_remaining == 0
        assert result.status == ValidityStatus.EXPIRING_SOON

    def test_past_is_expired(self) -> None:
        result = validity_status(NOW - timedelta(days=2), NOW)
        assert result.status == ValidityStatus.EXPIRED
        assert result.days_remaining == -2


class TestFormatFileSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5 MB"),
        ],
    )
    def test_formats(self, size: int, expected: str) -> None:
        assert format_file_size(size) == expected
