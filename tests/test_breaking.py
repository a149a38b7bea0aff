"""Tests for breaking-change classification and filtering."""
from schemadiff.core.breaking import (
    filter_breaking_only,
    has_breaking_changes,
    is_breaking_change,
    table_has_breaking_changes
)
from schemadiff.core.diff import diff_schemas
from schemadiff.models.schema import ConstraintType
from schemadiff.sql.ddl_parser import parse_sql


def test_type_change_is_breaking(column_factory):
    """Test that any type change is breaking."""
    assert is_breaking_change(
        column_factory(data_type="INTEGER"), column_factory(data_type="TEXT")
    )
    assert is_breaking_change(
        column_factory(data_type="VARCHAR(50)"), column_factory(data_type="VARCHAR(255)")
    )


def test_nullability_narrowing_is_breaking(column_factory):
    """Test NULL -> NOT NULL versus NOT NULL -> NULL."""
    assert is_breaking_change(column_factory(nullable=True), column_factory(nullable=False))
    assert not is_breaking_change(column_factory(nullable=False), column_factory(nullable=True))


def test_default_change_is_not_breaking(column_factory):
    """Test that default-only changes are safe."""
    assert not is_breaking_change(
        column_factory(default_val="'active'"), column_factory(default_val="'pending'")
    )


def test_empty_diff_is_not_breaking(schema_diff_factory):
    """Test an empty diff."""
    assert has_breaking_changes(schema_diff_factory()) is False


def test_added_tables_are_not_breaking(schema_diff_factory):
    """Test that new tables alone are safe."""
    assert has_breaking_changes(schema_diff_factory(added_tables=["products"])) is False


def test_dropped_table_is_breaking(schema_diff_factory):
    """Test that a removed table is breaking."""
    assert has_breaking_changes(schema_diff_factory(removed_tables=["audit_log"])) is True


def test_removed_column_is_breaking(table_diff_factory, column_factory, schema_diff_factory):
    """Test that removing a column is breaking."""
    table_diff = table_diff_factory(removed_columns=[column_factory(name="legacy")])
    assert table_has_breaking_changes(table_diff)
    assert has_breaking_changes(schema_diff_factory(changed_tables=[table_diff]))


def test_constraint_changes_are_never_breaking(
    table_diff_factory, constraint_factory, schema_diff_factory
):
    """Test that dropping or adding constraints does not count as breaking."""
    table_diff = table_diff_factory(
        removed_constraints=[constraint_factory()],
        added_constraints=[constraint_factory(constraint_type=ConstraintType.UNIQUE)]
    )
    assert not table_has_breaking_changes(table_diff)
    assert not has_breaking_changes(schema_diff_factory(changed_tables=[table_diff]))


def test_non_breaking_changes_only(table_diff_factory, column_change_factory, column_factory):
    """Test a table with added columns and safe changes."""
    table_diff = table_diff_factory(
        added_columns=[column_factory(name="name")],
        changed_columns=[column_change_factory(old_default="0", new_default="1")]
    )
    assert not table_has_breaking_changes(table_diff)


def test_breaking_flag_matches_classifier(table_factory, column_factory, schema_factory):
    """Test that each change's breaking flag equals the classifier's verdict."""
    old_cols = [
        column_factory(name="a", data_type="INT"),
        column_factory(name="b", nullable=True),
        column_factory(name="c", nullable=False),
        column_factory(name="d", default_val="1"),
    ]
    new_cols = [
        column_factory(name="a", data_type="BIGINT"),
        column_factory(name="b", nullable=False),
        column_factory(name="c", nullable=True),
        column_factory(name="d", default_val="2"),
    ]
    diff = diff_schemas(
        schema_factory(table_factory(columns=old_cols)),
        schema_factory(table_factory(columns=new_cols))
    )
    old_by_name = {c.name: c for c in old_cols}
    new_by_name = {c.name: c for c in new_cols}
    for change in diff.changed_tables[0].changed_columns:
        assert change.breaking == is_breaking_change(
            old_by_name[change.name], new_by_name[change.name]
        )
    assert [c.breaking for c in diff.changed_tables[0].changed_columns] == [
        True, True, False, False
    ]


def test_filter_breaking_only(
    table_diff_factory, column_factory, column_change_factory,
    constraint_factory, schema_diff_factory
):
    """Test that filtering keeps removals and breaking changes only."""
    users = table_diff_factory(
        name="users",
        added_columns=[column_factory(name="name")],
        changed_columns=[
            column_change_factory(name="email", new_nullable=False, breaking=True),
            column_change_factory(name="status", old_default="'a'", new_default="'b'"),
        ],
        added_constraints=[constraint_factory(constraint_type=ConstraintType.UNIQUE)]
    )
    orders = table_diff_factory(
        name="orders",
        removed_constraints=[constraint_factory(constraint_type=ConstraintType.FOREIGN_KEY)]
    )
    profile = table_diff_factory(
        name="profile",
        added_columns=[column_factory(name="bio")]
    )
    diff = schema_diff_factory(
        added_tables=["products"],
        removed_tables=["audit_log"],
        changed_tables=[users, orders, profile]
    )

    filtered = filter_breaking_only(diff)

    assert filtered.added_tables == []
    assert filtered.removed_tables == ["audit_log"]
    assert [t.name for t in filtered.changed_tables] == ["users", "orders"]

    kept_users, kept_orders = filtered.changed_tables
    assert kept_users.added_columns == []
    assert kept_users.added_constraints == []
    assert [c.name for c in kept_users.changed_columns] == ["email"]
    assert len(kept_orders.removed_constraints) == 1


def test_filter_does_not_mutate_input(table_diff_factory, column_factory, schema_diff_factory):
    """Test that filtering returns a new diff and leaves the original intact."""
    table_diff = table_diff_factory(added_columns=[column_factory(name="x")])
    diff = schema_diff_factory(added_tables=["t2"], changed_tables=[table_diff])

    filtered = filter_breaking_only(diff)

    assert filtered.is_empty
    assert diff.added_tables == ["t2"]
    assert diff.changed_tables[0].added_columns[0].name == "x"


def test_filtered_fixture_diff(fixtures_dir):
    """Test filtering the SQL fixture scenario."""
    diff = diff_schemas(
        parse_sql((fixtures_dir / "old.sql").read_text(encoding="utf-8")),
        parse_sql((fixtures_dir / "new.sql").read_text(encoding="utf-8"))
    )
    assert has_breaking_changes(diff)

    filtered = filter_breaking_only(diff)
    assert filtered.added_tables == []
    assert filtered.removed_tables == ["audit_log"]

    users, orders = filtered.changed_tables
    assert [c.name for c in users.changed_columns] == ["email"]
    assert [c.name for c in orders.changed_columns] == ["total"]
    assert len(orders.removed_constraints) == 1


def test_predicate_on_type_and_default_changes(table_factory, column_factory, schema_factory):
    """Test the aggregate predicate on a type change versus a default change."""
    base = schema_factory(table_factory(name="t", columns=[
        column_factory(name="c", data_type="INTEGER", default_val="0")
    ]))
    retyped = schema_factory(table_factory(name="t", columns=[
        column_factory(name="c", data_type="TEXT", default_val="0")
    ]))
    new_default = schema_factory(table_factory(name="t", columns=[
        column_factory(name="c", data_type="INTEGER", default_val="1")
    ]))

    assert has_breaking_changes(diff_schemas(base, retyped)) is True
    assert has_breaking_changes(diff_schemas(base, new_default)) is False


def test_dropped_table_scenario(table_factory, schema_factory):
    """Test that dropping a table is reported and breaking."""
    old = schema_factory(table_factory(name="users"), table_factory(name="orders"))
    new = schema_factory(table_factory(name="users"))

    diff = diff_schemas(old, new)
    assert diff.removed_tables == ["orders"]
    assert has_breaking_changes(diff) is True
