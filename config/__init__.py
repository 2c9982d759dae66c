"""
Configuration module.

Exports:
    get_settings: Function to get cached settings
    Settings: Settings model
    configure_logging: structlog setup
"""

from config.settings import get_settings, Settings
from config.logging import configure_logging

__all__ = [
    "get_settings",
    "Settings",
    "configure_logging",
]
