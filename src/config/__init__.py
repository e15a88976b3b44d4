"""Configuration module."""

from src.config.logging import configure_logging, get_logger
from src.config.settings import LedgerSettings, Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "LedgerSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
