"""Input source handling and resolution."""
from schemadiff.input.json_schema import SchemaParseError, parse_json_schema
from schemadiff.input.resolver import (
    InputResolutionError,
    InputType,
    detect_format,
    load_schema,
)

__all__ = [
    'InputType',
    'InputResolutionError',
    'SchemaParseError',
    'detect_format',
    'load_schema',
    'parse_json_schema',
]
