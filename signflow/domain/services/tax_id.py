"""CPF and CNPJ helpers.

Check-digit validation and display formatting for Brazilian taxpayer
identifiers. CPF identifies natural persons (11 digits), CNPJ identifies
legal entities (14 digits).
"""

from __future__ import annotations

import re

from signflow.domain.models.certificate import PersonType

_NON_DIGITS = re.compile(r"\D")

CPF_PLACEHOLDER = "000.000.000-00"
CNPJ_PLACEHOLDER = "00.000.000/0000-00"


def only_digits(value: str) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", value or "")


def _all_same_digit(digits: str) -> bool:
    return len(set(digits)) == 1


def _cpf_check_digit(digits: str, first_weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(first_weight, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def validate_cpf(value: str) -> bool:
    """Validate a CPF, formatted or not.

    Args:
        value: CPF with or without punctuation.

    Returns:
        True when the value has 11 digits, is not a repeated digit and
        both check digits match.
    """
    digits = only_digits(value)
    if len(digits) != 11 or _all_same_digit(digits):
        return False
    if _cpf_check_digit(digits[:9], 10) != int(digits[9]):
        return False
    return _cpf_check_digit(digits[:10], 11) == int(digits[10])


def _cnpj_check_digit(numbers: str) -> int:
    total = 0
    weight = len(numbers) - 7
    for digit in numbers:
        total += int(digit) * weight
        weight -= 1
        if weight < 2:
            weight = 9
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(value: str) -> bool:
    """Validate a CNPJ, formatted or not.

    Args:
        value: CNPJ with or without punctuation.

    Returns:
        True when the value has 14 digits, is not a repeated digit and
        both check digits match.
    """
    digits = only_digits(value)
    if len(digits) != 14 or _all_same_digit(digits):
        return False
    if _cnpj_check_digit(digits[:12]) != int(digits[12]):
        return False
    return _cnpj_check_digit(digits[:13]) == int(digits[13])


def validate_document(value: str, kind: PersonType) -> bool:
    """Validate a CPF (PF) or CNPJ (PJ)."""
    if kind == PersonType.PF:
        return validate_cpf(value)
    return validate_cnpj(value)


def format_cpf(value: str) -> str:
    digits = only_digits(value)
    if len(digits) != 11:
        return value
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_cnpj(value: str) -> str:
    digits = only_digits(value)
    if len(digits) != 14:
        return value
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def format_document(value: str) -> str:
    """Format as CPF or CNPJ depending on the digit count."""
    digits = only_digits(value)
    if len(digits) == 11:
        return format_cpf(digits)
    if len(digits) == 14:
        return format_cnpj(digits)
    return value


def placeholder_for(kind: PersonType) -> str:
    """Placeholder shown when a certificate carries no tax id."""
    return CPF_PLACEHOLDER if kind == PersonType.PF else CNPJ_PLACEHOLDER
