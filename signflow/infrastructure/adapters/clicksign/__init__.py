"""Clicksign API v3 adapter."""

from signflow.infrastructure.adapters.clicksign.client import (
    ClicksignClient,
    clean_signer_email,
    clean_signer_name,
)
from signflow.infrastructure.adapters.clicksign.errors import (
    ClicksignError,
    ClicksignPermanentError,
    ClicksignTransientError,
)

__all__: list[str] = [
    "ClicksignClient",
    "ClicksignError",
    "ClicksignPermanentError",
    "ClicksignTransientError",
    "clean_signer_email",
    "clean_signer_name",
]
