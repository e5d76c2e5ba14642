"""Certificate validity classification and size formatting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

EXPIRING_SOON_DAYS = 30
_SECONDS_PER_DAY = 86400
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


class ValidityStatus(Enum):
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Validity:
    """Validity classification of a certificate at a point in time."""

    status: ValidityStatus
    days_remaining: int


def validity_status(valid_to: datetime, now: datetime) -> Validity:
    """Classify a certificate by the days left until ``valid_to``.

    Days are rounded up, so a certificate expiring later today still has
    one day remaining.

    Args:
        valid_to: End of validity.
        now: Reference time.

    Returns:
        Validity with the status and the rounded-up day count.
    """
    days = math.ceil((valid_to - now).total_seconds() / _SECONDS_PER_DAY)
    if days < 0:
        status = ValidityStatus.EXPIRED
    elif days <= EXPIRING_SOON_DAYS:
        status = ValidityStatus.EXPIRING_SOON
    else:
        status = ValidityStatus.VALID
    return Validity(status=status, days_remaining=days)


def format_file_size(size: int) -> str:
    """Render a byte count as "1.5 MB" style text."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[index]}"
