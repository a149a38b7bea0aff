"""Settings management."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from sqlglot.dialects.dialect import Dialect

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("terminal", "markdown", "json")

DEFAULT_SETTINGS: Dict[str, Any] = {
    'format': 'terminal',
    'breaking_only': False,
    'color': True,
    'fail_on_breaking': False,
    'dialect': None,
}

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or are invalid."""


def load_settings(config_file: Optional[str] = None) -> Dict[str, Any]:
    """Load schemadiff settings.

    Loads settings with the following priority:
    1. Explicit --config path (highest priority)
    2. ~/.schemadiff/config.yaml
    3. SCHEMADIFF_* environment variables
    4. Built-in defaults

    The first source found is merged over the defaults. ``NO_COLOR`` in the
    environment always turns colour off.

    Args:
        config_file: Optional explicit settings file path

    Returns:
        Dictionary with every key of DEFAULT_SETTINGS

    Raises:
        SettingsError: If a settings file is invalid or unreadable
    """
    settings = dict(DEFAULT_SETTINGS)

    if config_file:
        settings.update(_load_yaml_settings(config_file))
        logger.info("Loaded settings from: %s", config_file)
    else:
        default_path = Path.home() / '.schemadiff' / 'config.yaml'
        if default_path.exists():
            settings.update(_load_yaml_settings(str(default_path)))
            logger.info("Loaded settings from: %s", default_path)
        else:
            env_settings = _load_from_env()
            if env_settings:
                settings.update(env_settings)
                logger.info("Loaded settings from environment variables")
            else:
                logger.debug("No settings found. Using defaults.")

    if 'NO_COLOR' in os.environ:
        settings['color'] = False

    return settings


def _load_yaml_settings(file_path: str) -> Dict[str, Any]:
    """Load a YAML settings file.

    Args:
        file_path: Path to YAML settings file

    Returns:
        Parsed settings with keys normalized to snake_case

    Raises:
        SettingsError: If file is invalid or missing
    """
    try:
        if not os.path.exists(file_path):
            raise SettingsError(f"Settings file not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SettingsError(
                f"Settings file must contain a YAML dictionary: {file_path}"
            )

        return {str(key).replace('-', '_'): value for key, value in data.items()}

    except yaml.YAMLError as e:
        raise SettingsError(
            f"Invalid YAML settings: {file_path}\n{e}"
        ) from e
    except OSError as e:
        raise SettingsError(
            f"Error reading settings file: {file_path}\n{e}"
        ) from e


def _load_from_env() -> Optional[Dict[str, Any]]:
    """Load settings from SCHEMADIFF_* environment variables.

    Returns:
        Settings dictionary or None if no variables are set
    """
    settings: Dict[str, Any] = {}

    for key in DEFAULT_SETTINGS:
        value = os.getenv(f"SCHEMADIFF_{key.upper()}")
        if value is None or value == '':
            continue
        if isinstance(DEFAULT_SETTINGS[key], bool):
            settings[key] = _parse_bool(key, value)
        else:
            settings[key] = value

    return settings if settings else None


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise SettingsError(f"Invalid boolean for {key}: {value!r}")


def validate_settings(settings: Dict[str, Any]) -> bool:
    """Validate settings values.

    Args:
        settings: Settings dictionary

    Returns:
        True if settings are usable

    Raises:
        SettingsError: If a value is out of range
    """
    output_format = settings.get('format')
    if output_format not in OUTPUT_FORMATS:
        raise SettingsError(
            f"Invalid output format: {output_format!r}. "
            f"Choose one of: {', '.join(OUTPUT_FORMATS)}"
        )

    for key in ('breaking_only', 'color', 'fail_on_breaking'):
        if not isinstance(settings.get(key), bool):
            raise SettingsError(f"Setting '{key}' must be true or false")

    dialect = settings.get('dialect')
    if dialect is not None:
        if not isinstance(dialect, str):
            raise SettingsError("Setting 'dialect' must be a dialect name")
        try:
            Dialect.get_or_raise(dialect)
        except ValueError as e:
            raise SettingsError(f"Unknown SQL dialect: {dialect!r}") from e

    return True
