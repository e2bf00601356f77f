"""
Model macros.

Each ``it_should_*`` method builds a typed declaration and expands it into
the group. Options a macro does not take are rejected by its signature,
so a misspelled option fails where it is written.

Usage:
    user = ModelMacros(User, messages=ErrorMessages.preset("pydantic"))
    user.it_should_require_attributes("name", "email")
    user.it_should_ensure_length_in_range("name", range(3, 11))
    user.it_should_have_many("posts", dependent="destroy")

    TestUser = user.as_test_class()
"""

from collections.abc import Callable
from typing import Any

from shouldkit.core.declarations import (
    AcceptanceDeclaration,
    AllowValuesDeclaration,
    AssociationDeclaration,
    ClassMethodsDeclaration,
    ColumnExpectation,
    DbColumnDeclaration,
    DbColumnsDeclaration,
    DeclarationBase,
    DisallowValuesDeclaration,
    InclusionDeclaration,
    IndicesDeclaration,
    InstanceMethodsDeclaration,
    LengthExactDeclaration,
    LengthMinimumDeclaration,
    LengthRangeDeclaration,
    Message,
    NamedScopeDeclaration,
    NumericOnlyDeclaration,
    PresenceDeclaration,
    ProtectedDeclaration,
    ReadonlyDeclaration,
    UniquenessDeclaration,
    ValueRangeDeclaration,
    build,
)
from shouldkit.core.errors import ConfigurationError
from shouldkit.core.expander import Expander
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import TestCase
from shouldkit.core.reflection import RelationshipKind
from shouldkit.macros.base import MacroGroup


def _bounds(range_or_min: range | int, maximum: int | None) -> tuple[int, int]:
    """
    Accept either ``(min, max)`` or a ``range``.

    A range is half-open, so ``range(3, 11)`` means lengths 3 through 10.
    """
    if isinstance(range_or_min, range):
        if maximum is not None:
            raise ConfigurationError("Pass either a range or minimum and maximum, not both")
        if range_or_min.step != 1:
            raise ConfigurationError("Ranges must have a step of 1")
        return range_or_min.start, range_or_min.stop - 1
    if maximum is None:
        raise ConfigurationError("A maximum is required when no range is given")
    return range_or_min, maximum


class ModelMacros(MacroGroup):
    """
    Macros for models: validations, relationships, columns and indexes.

    ``seed`` is an optional pre-configured instance (or zero-argument
    factory) used instead of a bare ``model()`` for value assertions.
    """

    def __init__(
        self,
        model: type,
        *,
        messages: ErrorMessages | None = None,
        seed: Any = None,
        description: str | None = None,
    ):
        """Initialize macros for ``model``."""
        super().__init__(description if description is not None else model.__name__)
        self.model = model
        self.seed = seed
        self.expander = Expander(messages)

    def declare(self, declaration: DeclarationBase, *, existing: Any = None) -> list[TestCase]:
        """Expand a declaration into this group."""
        cases = self.expander.expand(declaration, self.model, seed=self.seed, existing=existing)
        return self.extend(cases)

    def _declare(self, cls: type[DeclarationBase], **kwargs: Any) -> list[TestCase]:
        return self.declare(build(cls, **kwargs))

    # =========================================================================
    # Validations
    # =========================================================================

    def it_should_require_attributes(self, *attributes: str, message: Message = None) -> list[TestCase]:
        """
        The model cannot be saved if one of the attributes is missing.

        Example:
            it_should_require_attributes("name", "phone_number")
        """
        return self._declare(PresenceDeclaration, attributes=attributes, message=message)

    def it_should_require_unique_attributes(
        self,
        *attributes: str,
        message: Message = None,
        scoped_to: str | list[str] | tuple[str, ...] | None = None,
        existing: Any = None,
        scope_alternates: dict[str, Any] | None = None,
    ) -> list[TestCase]:
        """
        The model cannot be saved if one of the attributes duplicates an existing record.

        Needs an existing record, taken from ``existing`` or from
        ``model.first_record()``. Without one, only a failing
        "should have one record" case is registered.

        Examples:
            it_should_require_unique_attributes("keyword", "username")
            it_should_require_unique_attributes("email", scoped_to="name")
            it_should_require_unique_attributes("address", scoped_to=["first_name", "last_name"])
        """
        if isinstance(scoped_to, str):
            scoped_to = (scoped_to,)
        declaration = build(
            UniquenessDeclaration,
            attributes=attributes,
            message=message,
            scoped_to=tuple(scoped_to or ()),
            scope_alternates=scope_alternates or {},
        )
        return self.declare(declaration, existing=existing)

    def it_should_not_allow_values_for(self, attribute: str, *values: Any, message: Message = None) -> list[TestCase]:
        """
        The attribute cannot be set to any of the given values.

        Example:
            it_should_not_allow_values_for("isbn", "bad 1", "bad 2")
        """
        return self._declare(DisallowValuesDeclaration, attribute=attribute, values=values, message=message)

    def it_should_allow_values_for(self, attribute: str, *values: Any) -> list[TestCase]:
        """
        The attribute can be set to each of the given values.

        Example:
            it_should_allow_values_for("isbn", "isbn 1 2345 6789 0", "ISBN 1-2345-6789-0")
        """
        return self._declare(AllowValuesDeclaration, attribute=attribute, values=values)

    def it_should_ensure_length_in_range(
        self,
        attribute: str,
        range_or_min: range | int,
        maximum: int | None = None,
        *,
        short_message: Message = None,
        long_message: Message = None,
    ) -> list[TestCase]:
        """
        The attribute's length lies within a range.

        Example:
            it_should_ensure_length_in_range("password", 6, 20)
            it_should_ensure_length_in_range("password", range(6, 21))
        """
        minimum, maximum = _bounds(range_or_min, maximum)
        return self._declare(
            LengthRangeDeclaration,
            attribute=attribute,
            minimum=minimum,
            maximum=maximum,
            short_message=short_message,
            long_message=long_message,
        )

    def it_should_ensure_length_at_least(
        self, attribute: str, minimum: int, *, short_message: Message = None
    ) -> list[TestCase]:
        """
        The attribute is at least ``minimum`` characters long.

        Example:
            it_should_ensure_length_at_least("name", 3)
        """
        return self._declare(
            LengthMinimumDeclaration, attribute=attribute, minimum=minimum, short_message=short_message
        )

    def it_should_ensure_length_is(self, attribute: str, length: int, *, message: Message = None) -> list[TestCase]:
        """
        The attribute is exactly ``length`` characters long.

        Example:
            it_should_ensure_length_is("ssn", 9)
        """
        return self._declare(LengthExactDeclaration, attribute=attribute, length=length, message=message)

    def it_should_ensure_value_in_range(
        self,
        attribute: str,
        range_or_min: range | Any,
        maximum: Any = None,
        *,
        step: Any = None,
        low_message: Message = None,
        high_message: Message = None,
    ) -> list[TestCase]:
        """
        The attribute's value lies within a closed range.

        Fractional bounds need ``step`` to probe past them.

        Example:
            it_should_ensure_value_in_range("age", 0, 100)
            it_should_ensure_value_in_range("ratio", 0.0, 1.0, step=0.01)
        """
        minimum, maximum = _bounds(range_or_min, maximum)
        return self._declare(
            ValueRangeDeclaration,
            attribute=attribute,
            minimum=minimum,
            maximum=maximum,
            step=step,
            low_message=low_message,
            high_message=high_message,
        )

    def it_should_only_allow_numeric_values_for(self, *attributes: str, message: Message = None) -> list[TestCase]:
        """
        The attributes reject non-numeric input.

        Example:
            it_should_only_allow_numeric_values_for("age")
        """
        return self._declare(NumericOnlyDeclaration, attributes=attributes, message=message)

    def it_should_ensure_inclusion_of(
        self,
        attribute: str,
        allowed: list[Any] | tuple[Any, ...],
        *,
        bad_values: list[Any] | tuple[Any, ...] = (),
        message: Message = None,
    ) -> list[TestCase]:
        """
        The attribute accepts the allowed values and rejects ``bad_values``.

        Example:
            it_should_ensure_inclusion_of("role", ["admin", "member"], bad_values=["root"])
        """
        return self._declare(
            InclusionDeclaration,
            attribute=attribute,
            allowed=tuple(allowed),
            bad_values=tuple(bad_values),
            message=message,
        )

    def it_should_require_acceptance_of(self, *attributes: str, message: Message = None) -> list[TestCase]:
        """
        The model cannot be saved unless the attributes are accepted.

        Example:
            it_should_require_acceptance_of("eula")
        """
        return self._declare(AcceptanceDeclaration, attributes=attributes, message=message)

    def it_should_protect_attributes(self, *attributes: str) -> list[TestCase]:
        """The attributes cannot be set on mass update."""
        return self._declare(ProtectedDeclaration, attributes=attributes)

    def it_should_have_readonly_attributes(self, *attributes: str) -> list[TestCase]:
        """The attributes cannot change once the record has been created."""
        return self._declare(ReadonlyDeclaration, attributes=attributes)

    # =========================================================================
    # Relationships
    # =========================================================================

    def it_should_have_association(self, name: str, kind: RelationshipKind | str) -> list[TestCase]:
        """The model declares relationship ``name`` of the given kind."""
        return self._declare(
            AssociationDeclaration, names=(name,), relationship=RelationshipKind(kind), check_keys=False
        )

    def it_should_have_many(
        self, *names: str, through: str | None = None, dependent: str | None = None
    ) -> list[TestCase]:
        """
        The has-many relationships exist, and the associated tables carry the foreign key.

        Example:
            it_should_have_many("friends")
            it_should_have_many("enemies", through="friends")
            it_should_have_many("posts", dependent="destroy")
        """
        return self._declare(
            AssociationDeclaration,
            names=names,
            relationship=RelationshipKind.HAS_MANY,
            through=through,
            dependent=dependent,
        )

    def it_should_have_one(self, *names: str, dependent: str | None = None) -> list[TestCase]:
        """The has-one relationships exist, and the associated tables carry the foreign key."""
        return self._declare(
            AssociationDeclaration, names=names, relationship=RelationshipKind.HAS_ONE, dependent=dependent
        )

    def it_should_have_and_belong_to_many(self, *names: str) -> list[TestCase]:
        """The many-to-many relationships exist and their join tables are in place."""
        return self._declare(
            AssociationDeclaration, names=names, relationship=RelationshipKind.HAS_AND_BELONGS_TO_MANY
        )

    def it_should_belong_to(self, *names: str) -> list[TestCase]:
        """The belongs-to relationships exist and the model carries the foreign key."""
        return self._declare(AssociationDeclaration, names=names, relationship=RelationshipKind.BELONGS_TO)

    # =========================================================================
    # Methods, columns, indexes, scopes
    # =========================================================================

    def it_should_have_class_methods(self, *names: str) -> list[TestCase]:
        """The model type responds to the given methods."""
        return self._declare(ClassMethodsDeclaration, names=names)

    def it_should_have_instance_methods(self, *names: str) -> list[TestCase]:
        """Instances of the model respond to the given methods."""
        return self._declare(InstanceMethodsDeclaration, names=names)

    def it_should_have_db_columns(self, *names: str, type: str | None = None) -> list[TestCase]:  # noqa: A002
        """The backing table has the named columns."""
        return self._declare(DbColumnsDeclaration, names=names, type=type)

    def it_should_have_db_column(self, name: str, **options: Any) -> list[TestCase]:
        """
        The backing table has a column matching the given options.

        Options are the ColumnInfo fields: type, null, default, primary,
        limit, precision, scale and sql_type.

        Example:
            it_should_have_db_column("email", type="string", limit=255, null=True)
        """
        return self._declare(DbColumnDeclaration, name=name, options=build(ColumnExpectation, **options))

    def it_should_have_indices(self, *columns: str | list[str] | tuple[str, ...]) -> list[TestCase]:
        """
        The backing table is indexed on each column or tuple of columns.

        Example:
            it_should_have_indices("email", "name", ["commentable_type", "commentable_id"])
        """
        return self._declare(IndicesDeclaration, columns=columns)

    it_should_have_index = it_should_have_indices

    def it_should_have_named_scope(self, scope: str, *args: Any, **expected_options: Any) -> list[TestCase]:
        """
        Calling ``model.<scope>(*args)`` returns a scope built with ``expected_options``.

        Example:
            it_should_have_named_scope("visible", conditions={"visible": True})
            it_should_have_named_scope("recent", 5, limit=5)
        """
        return self._declare(NamedScopeDeclaration, scope=scope, args=args, expected_options=expected_options)

    # =========================================================================
    # Direct assertions
    # =========================================================================

    def it_should_be_valid(self, factory: Callable[[], Any]) -> TestCase:
        """The object built by ``factory`` passes validation."""

        def valid() -> None:
            obj = factory()
            assert obj.is_valid(), f"Errors: {pretty_error_messages(obj)}"

        return self.it("should be valid", valid)

    def it_should_save(self, factory: Callable[[], Any]) -> TestCase:
        """The object built by ``factory`` saves, and reloads when it can."""

        def saves() -> None:
            obj = factory()
            assert obj.save(), f"Errors: {pretty_error_messages(obj)}"
            reload = getattr(obj, "reload", None)
            if callable(reload):
                reload()

        return self.it("should save correctly", saves)


def pretty_error_messages(obj: Any) -> list[str]:
    """Render ``attribute message (value)`` for every error an object reports."""
    errors = getattr(obj, "errors", None)
    if not errors:
        return []
    items = errors.items() if hasattr(errors, "items") else errors
    rendered: list[str] = []
    for attribute, messages in items:
        if isinstance(messages, str):
            messages = [messages]
        for message in messages:
            rendered.append(f"{attribute} {message} ({getattr(obj, attribute, None)!r})")
    return rendered
