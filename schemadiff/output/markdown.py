"""Markdown output rendering for schema diffs."""
import os

from schemadiff.core.breaking import has_breaking_changes
from schemadiff.core.diff import SchemaDiff
from schemadiff.output.details import describe_change


def render_markdown(diff: SchemaDiff, old_file: str, new_file: str) -> str:
    """Render a schema diff as a Markdown report."""
    lines = [
        "# Schema Diff",
        "",
        f"**{os.path.basename(old_file)}** -> **{os.path.basename(new_file)}**",
        "",
    ]

    if has_breaking_changes(diff):
        lines.append("> **⚠️ BREAKING CHANGES DETECTED**")
        lines.append("")

    if diff.is_empty:
        lines.append("Schemas are identical. No differences found.")
        return "\n".join(lines)

    if diff.removed_tables:
        lines.append("## Dropped Tables")
        lines.extend(f"- `{name}`" for name in diff.removed_tables)
        lines.append("")

    if diff.added_tables:
        lines.append("## New Tables")
        lines.extend(f"- `{name}`" for name in diff.added_tables)
        lines.append("")

    if diff.changed_tables:
        lines.extend(["## Modified Tables", ""])

    for table in diff.changed_tables:
        lines.extend([f"### `{table.name}`", ""])

        if table.removed_columns or table.added_columns or table.changed_columns:
            lines.append("| Column | Change | Details |")
            lines.append("|--------|--------|---------|")
            for col in table.removed_columns:
                lines.append(f"| `{col.name}` | ❌ Removed | was {col.data_type} |")
            for col in table.added_columns:
                lines.append(f"| `{col.name}` | ✅ Added | {col.data_type} |")
            for change in table.changed_columns:
                label = "⚠️ Breaking" if change.breaking else "🔄 Changed"
                lines.append(f"| `{change.name}` | {label} | {describe_change(change)} |")
            lines.append("")

        if table.removed_constraints or table.added_constraints:
            for con in table.removed_constraints:
                lines.append(f"- ❌ Removed constraint: {con.type_name} ({', '.join(con.columns)})")
            for con in table.added_constraints:
                lines.append(f"- ✅ Added constraint: {con.type_name} ({', '.join(con.columns)})")
            lines.append("")

    return "\n".join(lines)
