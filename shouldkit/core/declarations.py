"""
Typed declaration models.

Each declaration kind is a frozen pydantic model with a ``kind``
discriminator and ``extra="forbid"``, so an option the kind does not
understand is rejected when the declaration is built. Declarations can be
written in Python, or loaded from YAML through ``parse_declaration`` and
``DeclarationFile``.
"""

import re
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from shouldkit.core.errors import ConfigurationError, InvalidRangeError, UnsupportedOptionError
from shouldkit.core.probes import check_numeric_bounds
from shouldkit.core.reflection import RelationshipKind

# A message override: a literal, or "/.../" in YAML for a pattern.
Message = str | re.Pattern[str] | None


def _coerce_message(v: Any) -> Any:
    if isinstance(v, str) and len(v) > 1 and v.startswith("/") and v.endswith("/"):
        return re.compile(v[1:-1])
    return v


class DeclarationBase(BaseModel):
    """Base class for all declaration kinds."""

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    def to_yaml(self) -> str:
        """Serialize to YAML format. Patterns are written as ``/.../``."""
        data = self.model_dump(mode="python")
        for key, value in data.items():
            if isinstance(value, re.Pattern):
                data[key] = f"/{value.pattern}/"
            elif isinstance(value, tuple):
                data[key] = list(value)
            elif isinstance(value, RelationshipKind):
                data[key] = value.value
        result: str = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        return result


class AttributesDeclaration(DeclarationBase):
    """Declarations that apply the same check to several attributes."""

    attributes: tuple[str, ...] = Field(..., description="Attributes to check")

    @field_validator("attributes")
    @classmethod
    def at_least_one_attribute(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate that there is at least one non-empty attribute."""
        if not v:
            raise ValueError("Declaration must name at least one attribute")
        for name in v:
            if not name.strip():
                raise ValueError("Attribute names must not be empty")
        return v


class MessageMixin(BaseModel):
    message: Message = Field(default=None, description="Expected error, overriding the default")

    @field_validator("message", mode="before")
    @classmethod
    def message_from_slashes(cls, v: Any) -> Any:
        return _coerce_message(v)


# =============================================================================
# Validation declarations
# =============================================================================


class PresenceDeclaration(AttributesDeclaration, MessageMixin):
    """The attributes must be present."""

    kind: Literal["presence"] = "presence"


class UniquenessDeclaration(AttributesDeclaration, MessageMixin):
    """The attributes must be unique, optionally within a scope."""

    kind: Literal["uniqueness"] = "uniqueness"
    scoped_to: tuple[str, ...] = Field(default=(), description="Scope attributes")
    scope_alternates: dict[str, Any] = Field(
        default_factory=dict, description="Replacement values for non-numeric scope attributes"
    )


class LengthRangeDeclaration(DeclarationBase):
    """The attribute's length must lie in ``[minimum, maximum]``."""

    kind: Literal["length_range"] = "length_range"
    attribute: str
    minimum: int = Field(..., ge=0)
    maximum: int = Field(..., ge=0)
    short_message: Message = None
    long_message: Message = None

    @field_validator("short_message", "long_message", mode="before")
    @classmethod
    def message_from_slashes(cls, v: Any) -> Any:
        return _coerce_message(v)

    @model_validator(mode="after")
    def bounds_ordered(self) -> "LengthRangeDeclaration":
        if self.minimum > self.maximum:
            raise InvalidRangeError(self.minimum, self.maximum)
        return self


class LengthMinimumDeclaration(DeclarationBase):
    """The attribute must be at least ``minimum`` characters long."""

    kind: Literal["length_minimum"] = "length_minimum"
    attribute: str
    minimum: int = Field(..., ge=0)
    short_message: Message = None

    @field_validator("short_message", mode="before")
    @classmethod
    def message_from_slashes(cls, v: Any) -> Any:
        return _coerce_message(v)


class LengthExactDeclaration(DeclarationBase, MessageMixin):
    """The attribute must be exactly ``length`` characters long."""

    kind: Literal["length_exact"] = "length_exact"
    attribute: str
    length: int = Field(..., ge=1)


class ValueRangeDeclaration(DeclarationBase):
    """The attribute's value must lie in ``[minimum, maximum]``."""

    kind: Literal["value_range"] = "value_range"
    attribute: str
    minimum: Any
    maximum: Any
    step: Any = None
    low_message: Message = None
    high_message: Message = None

    @field_validator("low_message", "high_message", mode="before")
    @classmethod
    def message_from_slashes(cls, v: Any) -> Any:
        return _coerce_message(v)

    @model_validator(mode="after")
    def bounds_ordered(self) -> "ValueRangeDeclaration":
        check_numeric_bounds(self.minimum, self.maximum, self.step)
        if self.minimum > self.maximum:
            raise InvalidRangeError(self.minimum, self.maximum)
        return self


class NumericOnlyDeclaration(AttributesDeclaration, MessageMixin):
    """The attributes must reject non-numeric input."""

    kind: Literal["numeric_only"] = "numeric_only"


class InclusionDeclaration(DeclarationBase, MessageMixin):
    """The attribute accepts only values from ``allowed``."""

    kind: Literal["inclusion"] = "inclusion"
    attribute: str
    allowed: tuple[Any, ...] = Field(..., min_length=1)
    bad_values: tuple[Any, ...] = ()


class AcceptanceDeclaration(AttributesDeclaration, MessageMixin):
    """The attributes must be accepted (a false value is rejected)."""

    kind: Literal["acceptance"] = "acceptance"


class AllowValuesDeclaration(DeclarationBase):
    """The attribute accepts each of ``values``."""

    kind: Literal["allow_values"] = "allow_values"
    attribute: str
    values: tuple[Any, ...] = Field(..., min_length=1)


class DisallowValuesDeclaration(DeclarationBase, MessageMixin):
    """The attribute rejects each of ``values``."""

    kind: Literal["disallow_values"] = "disallow_values"
    attribute: str
    values: tuple[Any, ...] = Field(..., min_length=1)


class ProtectedDeclaration(AttributesDeclaration):
    """The attributes cannot be set by mass assignment."""

    kind: Literal["protected"] = "protected"


class ReadonlyDeclaration(AttributesDeclaration):
    """The attributes cannot change once the record exists."""

    kind: Literal["readonly"] = "readonly"


# =============================================================================
# Metadata declarations
# =============================================================================


class AssociationDeclaration(DeclarationBase):
    """The model declares relationships of one kind."""

    kind: Literal["association"] = "association"
    names: tuple[str, ...] = Field(..., min_length=1)
    relationship: RelationshipKind
    through: str | None = None
    dependent: str | None = None
    check_keys: bool = Field(default=True, description="Also verify foreign keys and join tables")

    @model_validator(mode="after")
    def options_fit_kind(self) -> "AssociationDeclaration":
        if self.through and self.relationship != RelationshipKind.HAS_MANY:
            raise ValueError("'through' only applies to has_many relationships")
        if self.dependent and self.relationship not in (
            RelationshipKind.HAS_MANY,
            RelationshipKind.HAS_ONE,
        ):
            raise ValueError("'dependent' only applies to has_many and has_one relationships")
        return self


class ClassMethodsDeclaration(DeclarationBase):
    kind: Literal["class_methods"] = "class_methods"
    names: tuple[str, ...] = Field(..., min_length=1)


class InstanceMethodsDeclaration(DeclarationBase):
    kind: Literal["instance_methods"] = "instance_methods"
    names: tuple[str, ...] = Field(..., min_length=1)


class DbColumnsDeclaration(DeclarationBase):
    """The backing table has the named columns."""

    kind: Literal["db_columns"] = "db_columns"
    names: tuple[str, ...] = Field(..., min_length=1)
    type: str | None = None


class ColumnExpectation(BaseModel):
    """Options a single column must match. Unset options are not checked."""

    model_config = {"frozen": True, "extra": "forbid"}

    type: str | None = None
    null: bool | None = None
    default: Any = None
    primary: bool | None = None
    limit: int | None = None
    precision: int | None = None
    scale: int | None = None
    sql_type: str | None = None

    def checked(self) -> dict[str, Any]:
        """Options that were explicitly given."""
        return {k: getattr(self, k) for k in type(self).model_fields if k in self.model_fields_set}


class DbColumnDeclaration(DeclarationBase):
    """The backing table has a column matching the given options."""

    kind: Literal["db_column"] = "db_column"
    name: str
    options: ColumnExpectation = Field(default_factory=ColumnExpectation)


class IndicesDeclaration(DeclarationBase):
    """The backing table is indexed on each column or tuple of columns."""

    kind: Literal["indices"] = "indices"
    columns: tuple[tuple[str, ...], ...] = Field(..., min_length=1)

    @field_validator("columns", mode="before")
    @classmethod
    def wrap_single_columns(cls, v: Any) -> Any:
        return tuple((c,) if isinstance(c, str) else tuple(c) for c in v)


class NamedScopeDeclaration(DeclarationBase):
    """Calling the scope returns a scope object built with ``expected_options``."""

    kind: Literal["named_scope"] = "named_scope"
    scope: str
    args: tuple[Any, ...] = ()
    expected_options: dict[str, Any] = Field(default_factory=dict)


# Discriminated union type for all declarations
_DeclarationUnion = Annotated[
    Union[
        PresenceDeclaration,
        UniquenessDeclaration,
        LengthRangeDeclaration,
        LengthMinimumDeclaration,
        LengthExactDeclaration,
        ValueRangeDeclaration,
        NumericOnlyDeclaration,
        InclusionDeclaration,
        AcceptanceDeclaration,
        AllowValuesDeclaration,
        DisallowValuesDeclaration,
        ProtectedDeclaration,
        ReadonlyDeclaration,
        AssociationDeclaration,
        ClassMethodsDeclaration,
        InstanceMethodsDeclaration,
        DbColumnsDeclaration,
        DbColumnDeclaration,
        IndicesDeclaration,
        NamedScopeDeclaration,
    ],
    Field(discriminator="kind"),
]

Declaration = _DeclarationUnion

_adapter: TypeAdapter[DeclarationBase] = TypeAdapter(_DeclarationUnion)


def build(cls: type[BaseModel], **kwargs: Any) -> Any:
    """
    Build a declaration, reporting bad options as ConfigurationError.

    Raises:
        ConfigurationError: If the options are invalid or unsupported.
    """
    try:
        return cls(**kwargs)
    except ValidationError as e:
        raise _configuration_error(e) from e


def parse_declaration(data: dict[str, Any]) -> DeclarationBase:
    """
    Parse a dictionary into the appropriate declaration kind.

    Uses the 'kind' field as the discriminator.

    Raises:
        ConfigurationError: If the kind is unknown or the data is invalid.
    """
    try:
        return _adapter.validate_python(data)
    except ValidationError as e:
        raise _configuration_error(e) from e


def _configuration_error(e: ValidationError) -> ConfigurationError:
    for error in e.errors():
        cause = (error.get("ctx") or {}).get("error")
        if isinstance(cause, ConfigurationError):
            return cause
    extras = [".".join(str(p) for p in err["loc"]) for err in e.errors() if err["type"] == "extra_forbidden"]
    if extras:
        return UnsupportedOptionError(extras)
    return ConfigurationError(str(e))


# =============================================================================
# Declaration files
# =============================================================================


class DeclarationFile(BaseModel):
    """
    A YAML file of declarations against one target.

    Example:
        target: myapp.models:User
        messages:
          preset: pydantic
        declarations:
          - kind: presence
            attributes: [name]
          - kind: length_range
            attribute: name
            minimum: 3
            maximum: 10
    """

    model_config = {"extra": "forbid"}

    target: str = Field(..., description="Import path of the target, module:attribute")
    description: str = Field(default="", description="Group description, defaults to the target")
    messages: dict[str, Any] = Field(default_factory=dict, description="Message preset and overrides")
    declarations: list[dict[str, Any]] = Field(..., description="Declarations to expand")

    @field_validator("target")
    @classmethod
    def target_has_attribute(cls, v: str) -> str:
        """Validate that the target names a module and an attribute."""
        module, _, attr = v.partition(":")
        if not module or not attr:
            raise ValueError("Target must look like 'package.module:Attribute'")
        return v

    def parsed(self) -> list[DeclarationBase]:
        """Parse every declaration entry."""
        return [parse_declaration(d) for d in self.declarations]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DeclarationFile":
        """Load a declaration file from disk."""
        path = Path(path)
        if not path.exists():
            msg = f"Declaration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid declaration file {path}: {e}") from e
