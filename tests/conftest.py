"""Common test fixtures."""
# pylint: disable=redefined-outer-name,too-many-arguments,too-many-positional-arguments
from pathlib import Path
import pytest
from schemadiff.models.schema import Column, Constraint, ConstraintType, Schema, Table
from schemadiff.core.diff import ColumnChange, SchemaDiff, TableDiff

@pytest.fixture
def fixtures_dir():
    """Fixture for the directory containing test data files."""
    return Path(__file__).parent / "fixtures"

@pytest.fixture
def column_factory():
    """Factory to create Column instances for testing."""
    def _make_column(
        name="test_col",
        data_type="TEXT",
        nullable=True,
        default_val=None,
        primary_key=False,
        unique=False
    ):
        return Column(
            name=name,
            type=data_type,
            nullable=nullable,
            default_val=default_val,
            primary_key=primary_key,
            unique=unique
        )
    return _make_column

@pytest.fixture
def constraint_factory():
    """Factory to create Constraint instances for testing."""
    def _make_constraint(
        constraint_type=ConstraintType.PRIMARY_KEY,
        columns=None,
        name="pk_test_table",
        references=None
    ):
        return Constraint(
            name=name,
            type=constraint_type,
            columns=columns if columns is not None else ["id"],
            references=references
        )
    return _make_constraint

@pytest.fixture
def table_factory(column_factory):
    """Factory to create Table instances for testing."""
    def _make_table(name="test_table", columns=None, constraints=None):
        if columns is None:
            columns = [column_factory()]
        return Table(
            name=name,
            columns={c.name: c for c in columns},
            constraints=constraints or []
        )
    return _make_table

@pytest.fixture
def schema_factory():
    """Factory to create Schema instances from a list of tables."""
    def _make_schema(*tables):
        return Schema(tables={t.name: t for t in tables})
    return _make_schema

@pytest.fixture
def column_change_factory():
    """Factory to create ColumnChange instances for testing."""
    def _make_change(
        name="test_col",
        old_type="TEXT",
        new_type="TEXT",
        old_nullable=True,
        new_nullable=True,
        old_default=None,
        new_default=None,
        breaking=False
    ):
        return ColumnChange(
            name=name,
            old_type=old_type,
            new_type=new_type,
            old_nullable=old_nullable,
            new_nullable=new_nullable,
            old_default=old_default,
            new_default=new_default,
            breaking=breaking
        )
    return _make_change

@pytest.fixture
def schema_diff_factory():
    """Factory to create SchemaDiff instances for testing."""
    def _make_diff(added_tables=None, removed_tables=None, changed_tables=None):
        return SchemaDiff(
            added_tables=added_tables or [],
            removed_tables=removed_tables or [],
            changed_tables=changed_tables or []
        )
    return _make_diff

@pytest.fixture
def table_diff_factory():
    """Factory to create TableDiff instances for testing."""
    def _make_table_diff(name="test_table", **changes):
        return TableDiff(name=name, **changes)
    return _make_table_diff
