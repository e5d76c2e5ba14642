"""Structlog processor masking sensitive values.

Any key containing one of SENSITIVE_MARKERS (case-insensitive) has its
value replaced with "[REDACTED]", recursively through nested dicts and
lists.
"""

from typing import Any

REDACTED = "[REDACTED]"

SENSITIVE_MARKERS = (
    "password",
    "token",
    "secret",
    "key",
    "authorization",
    "cookie",
    "session",
)

# Keys structlog itself adds; never masked
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "logger"})


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive entries masked."""
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and is_sensitive_key(k) else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def redact_sensitive_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor applying redact() to the event dictionary."""
    for key in list(event_dict):
        if key in _RESERVED_KEYS:
            continue
        if is_sensitive_key(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = redact(event_dict[key])
    return event_dict
