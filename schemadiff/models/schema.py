"""Canonical schema model shared by the parsers and the diff engine."""
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)


class ConstraintType(str, Enum):
    """Constraint kinds recognized in SQL input."""

    PRIMARY_KEY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    FOREIGN_KEY = "FOREIGN KEY"


class Column(BaseModel):
    """Represents a column definition."""

    model_config = MODEL_CONFIG

    name: str
    data_type: str = Field(alias="type")
    nullable: bool = True
    default_val: Optional[str] = None
    primary_key: bool = False
    unique: bool = False


class Constraint(BaseModel):
    """Represents a table-level constraint.

    ``constraint_type`` is a ``ConstraintType`` for the kinds the SQL parser
    understands, or any other string passed through from JSON input.
    """

    model_config = MODEL_CONFIG

    name: str = ""
    constraint_type: Union[ConstraintType, str] = Field(alias="type")
    columns: List[str] = []
    references: Optional[str] = None

    @field_validator("constraint_type", mode="before")
    @classmethod
    def _coerce_known_type(cls, value):
        if isinstance(value, str) and not isinstance(value, ConstraintType):
            try:
                return ConstraintType(value)
            except ValueError:
                return value
        return value

    @property
    def type_name(self) -> str:
        """Constraint type as plain text."""
        if isinstance(self.constraint_type, ConstraintType):
            return self.constraint_type.value
        return self.constraint_type

    @property
    def identity(self) -> Tuple[str, str]:
        """Key used to match constraints across schema versions.

        Name and references are not part of it.
        """
        return self.type_name, ",".join(self.columns)


class Table(BaseModel):
    """Represents a table definition."""

    model_config = MODEL_CONFIG

    name: str
    columns: Dict[str, Column] = {}
    constraints: List[Constraint] = []


class Schema(BaseModel):
    """Root value produced by the parsers: table name to table."""

    model_config = MODEL_CONFIG

    tables: Dict[str, Table] = {}
