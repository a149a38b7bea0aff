"""Configuration management."""
from schemadiff.config.settings import (
    DEFAULT_SETTINGS,
    SettingsError,
    load_settings,
    validate_settings,
)

__all__ = [
    'DEFAULT_SETTINGS',
    'SettingsError',
    'load_settings',
    'validate_settings',
]
