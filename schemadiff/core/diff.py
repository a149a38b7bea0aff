"""Schema diffing and change detection."""
from typing import Dict, List, Optional

from pydantic import BaseModel

from schemadiff.core.breaking import is_breaking_change
from schemadiff.models.schema import MODEL_CONFIG, Column, Constraint, Schema, Table


class ColumnChange(BaseModel):
    """A column present in both versions whose type, nullability or default differs."""

    model_config = MODEL_CONFIG

    name: str
    old_type: str
    new_type: str
    old_nullable: bool
    new_nullable: bool
    old_default: Optional[str] = None
    new_default: Optional[str] = None
    breaking: bool


class TableDiff(BaseModel):
    """Changes within a table that exists in both versions."""

    model_config = MODEL_CONFIG

    name: str
    added_columns: List[Column] = []
    removed_columns: List[Column] = []
    changed_columns: List[ColumnChange] = []
    added_constraints: List[Constraint] = []
    removed_constraints: List[Constraint] = []

    @property
    def is_empty(self) -> bool:
        return not (
            self.added_columns or self.removed_columns or self.changed_columns
            or self.added_constraints or self.removed_constraints
        )


class SchemaDiff(BaseModel):
    """All differences between two schemas."""

    model_config = MODEL_CONFIG

    added_tables: List[str] = []
    removed_tables: List[str] = []
    changed_tables: List[TableDiff] = []

    @property
    def is_empty(self) -> bool:
        return not (self.added_tables or self.removed_tables or self.changed_tables)


def diff_schemas(old: Schema, new: Schema) -> SchemaDiff:
    """Compare two schemas.

    Tables and columns are matched by name, constraints by type and column
    list. Added items follow the new schema's order and removed items the old
    schema's order.

    Args:
        old: Original schema
        new: Modified schema

    Returns:
        SchemaDiff containing all detected changes
    """
    removed_tables = [name for name in old.tables if name not in new.tables]
    added_tables = [name for name in new.tables if name not in old.tables]

    changed_tables = []
    for name, new_table in new.tables.items():
        old_table = old.tables.get(name)
        if old_table is None:
            continue
        table_diff = _diff_tables(name, old_table, new_table)
        if not table_diff.is_empty:
            changed_tables.append(table_diff)

    return SchemaDiff(
        added_tables=added_tables,
        removed_tables=removed_tables,
        changed_tables=changed_tables
    )


def _diff_tables(name: str, old_table: Table, new_table: Table) -> TableDiff:
    """Compare columns and constraints of a table that exists in both versions."""
    added_columns = []
    changed_columns = []
    for col_name, new_col in new_table.columns.items():
        old_col = old_table.columns.get(col_name)
        if old_col is None:
            added_columns.append(new_col)
        elif _column_changed(old_col, new_col):
            changed_columns.append(ColumnChange(
                name=col_name,
                old_type=old_col.data_type,
                new_type=new_col.data_type,
                old_nullable=old_col.nullable,
                new_nullable=new_col.nullable,
                old_default=old_col.default_val,
                new_default=new_col.default_val,
                breaking=is_breaking_change(old_col, new_col)
            ))

    removed_columns = [
        col for col_name, col in old_table.columns.items()
        if col_name not in new_table.columns
    ]

    old_keys = _constraint_keys(old_table.constraints)
    new_keys = _constraint_keys(new_table.constraints)

    return TableDiff(
        name=name,
        added_columns=added_columns,
        removed_columns=removed_columns,
        changed_columns=changed_columns,
        added_constraints=[c for c in new_table.constraints if c.identity not in old_keys],
        removed_constraints=[c for c in old_table.constraints if c.identity not in new_keys]
    )


def _column_changed(old_col: Column, new_col: Column) -> bool:
    return (
        old_col.data_type != new_col.data_type
        or old_col.nullable != new_col.nullable
        or old_col.default_val != new_col.default_val
    )


def _constraint_keys(constraints: List[Constraint]) -> Dict[tuple, Constraint]:
    return {c.identity: c for c in constraints}
