"""Breaking-change classification."""
from typing import TYPE_CHECKING

from schemadiff.models.schema import Column

if TYPE_CHECKING:
    from schemadiff.core.diff import SchemaDiff, TableDiff


def is_breaking_change(old: Column, new: Column) -> bool:
    """A column change breaks consumers on any type change or a NULL -> NOT NULL narrowing.

    Default-only changes and NOT NULL -> NULL relaxations are not breaking.
    """
    return old.data_type != new.data_type or (old.nullable and not new.nullable)


def table_has_breaking_changes(table_diff: "TableDiff") -> bool:
    """Removed columns or breaking column changes; constraint changes never count."""
    if table_diff.removed_columns:
        return True
    return any(change.breaking for change in table_diff.changed_columns)


def has_breaking_changes(diff: "SchemaDiff") -> bool:
    """Check whether a diff contains anything likely to break existing consumers."""
    if diff.removed_tables:
        return True
    return any(table_has_breaking_changes(t) for t in diff.changed_tables)


def filter_breaking_only(diff: "SchemaDiff") -> "SchemaDiff":
    """Reduce a diff to removals and breaking changes.

    Added tables, columns and constraints are dropped, as are non-breaking
    column changes. Removed constraints are kept. Tables left with nothing are
    omitted.
    """
    changed_tables = []
    for table_diff in diff.changed_tables:
        filtered = table_diff.model_copy(update={
            "added_columns": [],
            "changed_columns": [c for c in table_diff.changed_columns if c.breaking],
            "added_constraints": [],
        })
        if filtered.removed_columns or filtered.changed_columns or filtered.removed_constraints:
            changed_tables.append(filtered)

    return diff.model_copy(update={
        "added_tables": [],
        "changed_tables": changed_tables,
    })
