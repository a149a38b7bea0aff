"""Input source detection and loading."""
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from schemadiff.input.json_schema import parse_json_schema
from schemadiff.models.schema import Schema
from schemadiff.sql.ddl_parser import parse_sql

logger = logging.getLogger(__name__)


class InputType(Enum):
    """Schema file formats."""

    JSON = "json"  # JSON schema documents
    SQL = "sql"    # CREATE TABLE statements


class InputResolutionError(ValueError):
    """Raised when an input file cannot be read."""


def detect_format(path: str) -> InputType:
    """Pick the parser for a file from its extension.

    ``.json`` selects the JSON parser; every other extension, or none at all,
    is read as SQL.
    """
    if Path(path).suffix.lower() == ".json":
        return InputType.JSON
    return InputType.SQL


def load_schema(path: str, dialect: Optional[str] = None) -> Schema:
    """Read a schema file and parse it with the parser for its format.

    Args:
        path: Path to a .json or SQL file
        dialect: sqlglot dialect used to lex SQL files (ignored for JSON)

    Returns:
        Parsed Schema

    Raises:
        InputResolutionError: If the file is missing or unreadable
        SchemaParseError: If a .json file does not contain valid JSON
    """
    if not os.path.exists(path):
        raise InputResolutionError(f"Input file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputResolutionError(f"Error reading input file: {path}\n{e}") from e

    input_type = detect_format(path)
    logger.debug("Parsing %s as %s", path, input_type.value)

    if input_type == InputType.JSON:
        return parse_json_schema(content)
    return parse_sql(content, dialect)
