"""JSON output rendering for schema diffs."""
import json  # pylint: disable=import-self,redefined-builtin
import os
from typing import Any, Dict

from schemadiff.core.breaking import has_breaking_changes
from schemadiff.core.diff import SchemaDiff


def build_report(diff: SchemaDiff, old_file: str, new_file: str) -> Dict[str, Any]:
    """Convert a diff to the JSON report structure."""
    return {
        "oldFile": os.path.basename(old_file),
        "newFile": os.path.basename(new_file),
        "breaking": has_breaking_changes(diff),
        "summary": {
            "addedTables": len(diff.added_tables),
            "removedTables": len(diff.removed_tables),
            "modifiedTables": len(diff.changed_tables),
        },
        "addedTables": list(diff.added_tables),
        "removedTables": list(diff.removed_tables),
        "changedTables": [
            {
                "name": t.name,
                "addedColumns": [{"name": c.name, "type": c.data_type} for c in t.added_columns],
                "removedColumns": [{"name": c.name, "type": c.data_type} for c in t.removed_columns],
                "changedColumns": [
                    c.model_dump(mode="json", by_alias=True) for c in t.changed_columns
                ],
                "addedConstraints": [
                    c.model_dump(mode="json", by_alias=True, exclude_none=True)
                    for c in t.added_constraints
                ],
                "removedConstraints": [
                    c.model_dump(mode="json", by_alias=True, exclude_none=True)
                    for c in t.removed_constraints
                ],
            }
            for t in diff.changed_tables
        ],
    }


def render_json(diff: SchemaDiff, old_file: str, new_file: str) -> str:
    """Render a schema diff as a JSON string."""
    # pylint: disable=no-member
    return json.dumps(build_report(diff, old_file, new_file), indent=2, ensure_ascii=False)
