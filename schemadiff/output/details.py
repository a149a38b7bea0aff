"""Shared text helpers for the renderers."""
from typing import Optional

from schemadiff.core.diff import ColumnChange


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _default(value: Optional[str]) -> str:
    return "none" if value is None else value


def describe_change(change: ColumnChange) -> str:
    """List only the fields that differ, e.g. ``type: INT -> TEXT, nullable: true -> false``."""
    parts = []
    if change.old_type != change.new_type:
        parts.append(f"type: {change.old_type} -> {change.new_type}")
    if change.old_nullable != change.new_nullable:
        parts.append(f"nullable: {_flag(change.old_nullable)} -> {_flag(change.new_nullable)}")
    if change.old_default != change.new_default:
        parts.append(f"default: {_default(change.old_default)} -> {_default(change.new_default)}")
    return ", ".join(parts)
