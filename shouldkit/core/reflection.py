"""
Interfaces a target type implements so declarations can inspect it.

Instead of introspecting an ORM at runtime, shouldkit asks the target to
describe itself: its relationships, backing columns, indexes and the
records it already holds. Each concrete model implements only the methods
the declarations made against it need.
"""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class RelationshipKind(str, Enum):
    """Kinds of declared relationships between models."""

    HAS_MANY = "has_many"
    HAS_ONE = "has_one"
    BELONGS_TO = "belongs_to"
    HAS_AND_BELONGS_TO_MANY = "has_and_belongs_to_many"


class RelationshipInfo(BaseModel):
    """A declared relationship as reported by the owning model."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    name: str = Field(..., description="Relationship name on the owner")
    kind: RelationshipKind = Field(..., description="Relationship kind")
    target: Any = Field(default=None, description="Associated model type")
    foreign_key: str | None = Field(default=None, description="Explicit foreign key column")
    as_: str | None = Field(default=None, description="Polymorphic interface name")
    polymorphic: bool = Field(default=False, description="Whether a belongs_to is polymorphic")
    through: str | None = Field(default=None, description="Intermediate relationship name")
    dependent: str | None = Field(default=None, description="Dependent option (destroy, nullify, ...)")
    join_table: str | None = Field(default=None, description="Join table for many-to-many")


class ColumnInfo(BaseModel):
    """A backing column as reported by the model."""

    model_config = {"frozen": True}

    name: str
    type: str | None = None
    null: bool = True
    default: Any = None
    primary: bool = False
    limit: int | None = None
    precision: int | None = None
    scale: int | None = None
    sql_type: str | None = None


class IndexInfo(BaseModel):
    """A database index over one or more columns."""

    model_config = {"frozen": True}

    columns: tuple[str, ...]
    unique: bool = False


@runtime_checkable
class ValidatableEntity(Protocol):
    """An instance whose attributes can be assigned and then validated."""

    def is_valid(self) -> bool: ...

    def errors_on(self, attribute: str) -> Any: ...


@runtime_checkable
class ScopeLike(Protocol):
    """The object a named scope returns."""

    @property
    def options(self) -> Mapping[str, Any]: ...


class ReflectedModel(Protocol):
    """
    Class-level metadata a model type reports about itself.

    All methods are called on the type, never on an instance.
    """

    @classmethod
    def describe_relationship(cls, name: str) -> RelationshipInfo | None: ...

    @classmethod
    def describe_columns(cls) -> list[ColumnInfo]: ...

    @classmethod
    def describe_indexes(cls) -> list[IndexInfo]: ...

    @classmethod
    def table_name(cls) -> str: ...

    @classmethod
    def table_names(cls) -> list[str]: ...

    @classmethod
    def first_record(cls) -> Any: ...

    @classmethod
    def protected_attributes(cls) -> list[str]: ...

    @classmethod
    def accessible_attributes(cls) -> list[str]: ...

    @classmethod
    def readonly_attributes(cls) -> list[str]: ...


# =============================================================================
# Naming helpers
# =============================================================================


def underscore(name: str) -> str:
    """``UserProfile`` -> ``user_profile``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def foreign_key_for(name: str) -> str:
    """``UserProfile`` or ``user_profile`` -> ``user_profile_id``."""
    return f"{underscore(name)}_id"


def default_table_name(model: type) -> str:
    """Table name for a model type, preferring its own ``table_name()``."""
    table_name = getattr(model, "table_name", None)
    if callable(table_name):
        return str(table_name())
    return f"{underscore(model.__name__)}s"


def column_names(model: type) -> list[str]:
    """Names of the columns a model reports."""
    return [c.name for c in model.describe_columns()]  # type: ignore[attr-defined]


def find_column(model: type, name: str) -> ColumnInfo | None:
    for column in model.describe_columns():  # type: ignore[attr-defined]
        if column.name == name:
            return column
    return None
