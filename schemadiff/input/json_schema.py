"""JSON schema document parsing."""
import json
import logging
from typing import Any, Dict, List, Optional

from schemadiff.models.schema import Column, Constraint, Schema, Table

logger = logging.getLogger(__name__)


class SchemaParseError(ValueError):
    """Raised when a JSON schema document is not well-formed JSON."""


def parse_json_schema(text: str) -> Schema:
    """Parse a JSON schema document into a Schema.

    Accepts ``{"tables": {name: TableDef}}`` or the bare ``{name: TableDef}``
    mapping. Missing or mistyped fields fall back to defaults instead of
    failing.

    Args:
        text: JSON document text

    Returns:
        Schema with lower-cased table and column names

    Raises:
        SchemaParseError: If the text is not valid JSON
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Invalid JSON schema: {e}") from e

    source = data.get("tables") if isinstance(data, dict) and "tables" in data else data
    if not isinstance(source, dict):
        logger.debug("JSON schema has no table mapping; treating it as empty")
        return Schema()

    tables: Dict[str, Table] = {}
    for table_name, table_def in source.items():
        table = _parse_table(str(table_name).lower(), table_def)
        tables[table.name] = table

    return Schema(tables=tables)


def _parse_table(name: str, table_def: Any) -> Table:
    if not isinstance(table_def, dict):
        logger.debug("Table %s has no definition object; using an empty table", name)
        table_def = {}

    columns: Dict[str, Column] = {}
    column_defs = table_def.get("columns")
    if isinstance(column_defs, dict):
        for col_name, col_def in column_defs.items():
            column = _parse_column(str(col_name).lower(), col_def)
            columns[column.name] = column

    constraints: List[Constraint] = []
    constraint_defs = table_def.get("constraints")
    if isinstance(constraint_defs, list):
        constraints = [_parse_constraint(c) for c in constraint_defs]

    return Table(name=name, columns=columns, constraints=constraints)


def _parse_column(name: str, col_def: Any) -> Column:
    if not isinstance(col_def, dict):
        col_def = {}

    data_type = col_def.get("type")
    if not isinstance(data_type, str):
        data_type = "TEXT"

    return Column(
        name=name,
        type=data_type.upper(),
        nullable=col_def.get("nullable") is not False,
        default_val=_stringify_default(col_def.get("default")),
        primary_key=col_def.get("primaryKey") is True,
        unique=col_def.get("unique") is True
    )


def _parse_constraint(con_def: Any) -> Constraint:
    if not isinstance(con_def, dict):
        con_def = {}

    columns = con_def.get("columns")
    if not isinstance(columns, list):
        columns = []

    references = con_def.get("references")
    return Constraint(
        name=str(con_def.get("name") or ""),
        type=str(con_def.get("type") or ""),
        columns=[str(c).lower() for c in columns],
        references=str(references) if references else None
    )


def _stringify_default(value: Any) -> Optional[str]:
    """Render a JSON default as text so it compares with SQL defaults."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        # 1.0 and 1 are the same JSON number
        return str(int(value))
    return str(value)
