"""Terminal output rendering for schema diffs."""
import os

from schemadiff.core.breaking import has_breaking_changes
from schemadiff.core.diff import SchemaDiff
from schemadiff.output.details import describe_change

ANSI_CODES = {
    "reset": "\x1b[0m",
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
    "bg_red": "\x1b[41m",
}


class _Palette:  # pylint: disable=too-few-public-methods
    """Lookup of ANSI codes that collapses to empty strings when colour is off."""

    def __init__(self, enabled: bool):
        self.enabled = enabled

    def __getattr__(self, name: str) -> str:
        if name not in ANSI_CODES:
            raise AttributeError(name)
        return ANSI_CODES[name] if self.enabled else ""


def render_terminal(diff: SchemaDiff, old_file: str, new_file: str, color: bool = True) -> str:
    """Render a schema diff for the terminal."""
    c = _Palette(color)
    lines = [
        "",
        f"{c.bold}{c.cyan}  Schema Diff{c.reset}",
        f"{c.dim}  {os.path.basename(old_file)} -> {os.path.basename(new_file)}{c.reset}",
        "",
    ]

    if has_breaking_changes(diff):
        lines.append(f"  {c.bg_red}{c.white}{c.bold} ⚠ BREAKING CHANGES DETECTED {c.reset}")
        lines.append("")

    if diff.is_empty:
        lines.append(f"  {c.green}✓ Schemas are identical{c.reset}")
        lines.append("")
        return "\n".join(lines)

    for name in diff.removed_tables:
        lines.append(f"  {c.red}{c.bold}✗ DROPPED TABLE{c.reset} {c.red}{name}{c.reset}")
    for name in diff.added_tables:
        lines.append(f"  {c.green}{c.bold}+ NEW TABLE{c.reset} {c.green}{name}{c.reset}")
    if diff.added_tables or diff.removed_tables:
        lines.append("")

    for table in diff.changed_tables:
        lines.append(f"  {c.yellow}{c.bold}~ MODIFIED{c.reset} {c.yellow}{table.name}{c.reset}")

        for col in table.removed_columns:
            lines.append(f"    {c.red}- {col.name}{c.reset} {c.dim}({col.data_type}){c.reset}")
        for col in table.added_columns:
            lines.append(f"    {c.green}+ {col.name}{c.reset} {c.dim}({col.data_type}){c.reset}")
        for change in table.changed_columns:
            marker = f"{c.red}⚠" if change.breaking else f"{c.yellow}~"
            lines.append(
                f"    {marker} {change.name}{c.reset} {c.dim}({describe_change(change)}){c.reset}"
            )

        for con in table.removed_constraints:
            lines.append(
                f"    {c.red}- constraint {con.type_name}{c.reset} "
                f"{c.dim}({', '.join(con.columns)}){c.reset}"
            )
        for con in table.added_constraints:
            lines.append(
                f"    {c.green}+ constraint {con.type_name}{c.reset} "
                f"{c.dim}({', '.join(con.columns)}){c.reset}"
            )
        lines.append("")

    stats = []
    if diff.added_tables:
        stats.append(f"{c.green}+{len(diff.added_tables)} tables{c.reset}")
    if diff.removed_tables:
        stats.append(f"{c.red}-{len(diff.removed_tables)} tables{c.reset}")
    if diff.changed_tables:
        stats.append(f"{c.yellow}~{len(diff.changed_tables)} modified{c.reset}")
    lines.append(f"  {c.dim}Summary:{c.reset} {'  '.join(stats)}")
    lines.append("")

    return "\n".join(lines)
