"""Configuration module for SignFlow."""

from signflow.config.settings import (
    ClicksignConfig,
    SessionConfig,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)

__all__: list[str] = [
    "ClicksignConfig",
    "SessionConfig",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
