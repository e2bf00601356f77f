"""
Declaration-to-test-case expansion.

The Expander is the single entry point suite-authoring code goes through:
it takes a typed declaration and a target and returns the test cases the
declaration stands for. Probe-bearing declarations go through the
boundary-value generator and the good/bad assertion protocol; metadata
declarations resolve against the target's reflection interface and yield
one case per declared item.

Expansion is stateless and runs once, while the suite is being built.
Nothing here runs an assertion; the returned procedures do that later.
"""

import logging
from collections.abc import Callable
from typing import Any

from shouldkit.core.declarations import (
    AcceptanceDeclaration,
    AllowValuesDeclaration,
    AssociationDeclaration,
    ClassMethodsDeclaration,
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
    NamedScopeDeclaration,
    NumericOnlyDeclaration,
    PresenceDeclaration,
    ProtectedDeclaration,
    ReadonlyDeclaration,
    UniquenessDeclaration,
    ValueRangeDeclaration,
)
from shouldkit.core.errors import ConfigurationError
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import ANY_ERROR, ErrorIndicator, ExpectedOutcome, TestCase
from shouldkit.core.probes import (
    ProbeKind,
    ProbeSet,
    generate_exact_length_probes,
    generate_length_range_probes,
    generate_minimum_length_probes,
    generate_value_range_probes,
    numeric_only_probe,
)
from shouldkit.core.protocol import (
    assert_bad_value,
    assert_good_value,
    assert_probe,
    resolve_entity,
)
from shouldkit.core.reflection import (
    RelationshipInfo,
    RelationshipKind,
    ScopeLike,
    column_names,
    default_table_name,
    find_column,
    foreign_key_for,
)

logger = logging.getLogger(__name__)


def _name_of(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return type(target).__name__


def _nest(cases: list[TestCase], *group: str) -> list[TestCase]:
    return [case.within(*group) for case in cases]


def _check(description: str, procedure: Callable[[], None]) -> TestCase:
    return TestCase(description=description, procedure=procedure, expected=ExpectedOutcome.SATISFIED)


class Expander:
    """
    Expands declarations into test cases.

    Usage:
        expander = Expander(ErrorMessages.preset("pydantic"))
        cases = expander.expand(
            LengthRangeDeclaration(attribute="name", minimum=3, maximum=10),
            User,
        )
    """

    def __init__(self, messages: ErrorMessages | None = None):
        """Initialize the expander with the default message table to use."""
        self.messages = messages or ErrorMessages()
        self._handlers: dict[type[DeclarationBase], Callable[..., list[TestCase]]] = {
            PresenceDeclaration: self._expand_presence,
            UniquenessDeclaration: self._expand_uniqueness,
            LengthRangeDeclaration: self._expand_length_range,
            LengthMinimumDeclaration: self._expand_length_minimum,
            LengthExactDeclaration: self._expand_length_exact,
            ValueRangeDeclaration: self._expand_value_range,
            NumericOnlyDeclaration: self._expand_numeric_only,
            InclusionDeclaration: self._expand_inclusion,
            AcceptanceDeclaration: self._expand_acceptance,
            AllowValuesDeclaration: self._expand_allow_values,
            DisallowValuesDeclaration: self._expand_disallow_values,
            ProtectedDeclaration: self._expand_protected,
            ReadonlyDeclaration: self._expand_readonly,
            AssociationDeclaration: self._expand_association,
            ClassMethodsDeclaration: self._expand_class_methods,
            InstanceMethodsDeclaration: self._expand_instance_methods,
            DbColumnsDeclaration: self._expand_db_columns,
            DbColumnDeclaration: self._expand_db_column,
            IndicesDeclaration: self._expand_indices,
            NamedScopeDeclaration: self._expand_named_scope,
        }

    def expand(
        self,
        declaration: DeclarationBase,
        target: Any,
        *,
        seed: Any = None,
        existing: Any = None,
    ) -> list[TestCase]:
        """
        Expand one declaration against a target.

        Args:
            declaration: A typed declaration
            target: The model type (or a live instance) under test
            seed: Optional pre-configured instance, or factory, used instead
                of a bare instance when ``target`` is a type
            existing: Optional existing record for uniqueness declarations

        Returns:
            The generated test cases, in registration order

        Raises:
            ConfigurationError: If the declaration cannot be expanded
        """
        handler = self._handlers.get(type(declaration))
        if handler is None:
            raise ConfigurationError(f"Unsupported declaration: {type(declaration).__name__}")

        if isinstance(declaration, UniquenessDeclaration):
            cases = handler(declaration, target, seed, existing)
        else:
            cases = handler(declaration, target, seed)
        kind = getattr(declaration, "kind", type(declaration).__name__)
        cases = [case.tagged(kind) for case in cases]
        logger.debug(
            "Expanded %s against %s into %d cases",
            kind,
            _name_of(target),
            len(cases),
        )
        return cases

    def expand_all(self, declarations: list[DeclarationBase], target: Any, *, seed: Any = None) -> list[TestCase]:
        """Expand several declarations against the same target."""
        cases: list[TestCase] = []
        for declaration in declarations:
            cases.extend(self.expand(declaration, target, seed=seed))
        return cases

    # =========================================================================
    # Probe-bearing declarations
    # =========================================================================

    def _expand_probes(
        self,
        attribute: str,
        probes: ProbeSet,
        target: Any,
        seed: Any,
        indicator_for: Callable[[ProbeKind], ErrorIndicator],
    ) -> list[TestCase]:
        cases: list[TestCase] = []
        for probe in probes.probes:
            verb = "allows" if probe.valid else "does not allow"
            group = f"{verb} {attribute} to be {probe.description}"
            generated = assert_probe(target, attribute, probe, indicator_for(probe.kind), seed=seed)
            cases.extend(_nest(generated, group))
        return cases

    def _expand_presence(self, decl: PresenceDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("blank")
        cases: list[TestCase] = []
        for attribute in decl.attributes:
            generated = assert_bad_value(target, attribute, None, message, seed=seed)
            cases.extend(_nest(generated, f"requires {attribute} to be set"))
        return cases

    def _expand_length_range(self, decl: LengthRangeDeclaration, target: Any, seed: Any) -> list[TestCase]:
        short = decl.short_message or self.messages.indicator("too_short", count=decl.minimum)
        long = decl.long_message or self.messages.indicator("too_long", count=decl.maximum)
        probes = generate_length_range_probes(decl.minimum, decl.maximum)

        def indicator_for(kind: ProbeKind) -> ErrorIndicator:
            return long if kind in (ProbeKind.TOO_LONG, ProbeKind.AT_MAX) else short

        return self._expand_probes(decl.attribute, probes, target, seed, indicator_for)

    def _expand_length_minimum(self, decl: LengthMinimumDeclaration, target: Any, seed: Any) -> list[TestCase]:
        short = decl.short_message or self.messages.indicator("too_short", count=decl.minimum)
        probes = generate_minimum_length_probes(decl.minimum)
        return self._expand_probes(decl.attribute, probes, target, seed, lambda _: short)

    def _expand_length_exact(self, decl: LengthExactDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("wrong_length", count=decl.length)
        probes = generate_exact_length_probes(decl.length)
        return self._expand_probes(decl.attribute, probes, target, seed, lambda _: message)

    def _expand_value_range(self, decl: ValueRangeDeclaration, target: Any, seed: Any) -> list[TestCase]:
        low = decl.low_message or self.messages.indicator("inclusion")
        high = decl.high_message or self.messages.indicator("inclusion")
        probes = generate_value_range_probes(decl.minimum, decl.maximum, decl.step)

        def indicator_for(kind: ProbeKind) -> ErrorIndicator:
            return high if kind in (ProbeKind.ABOVE_MAX, ProbeKind.AT_MAX) else low

        return self._expand_probes(decl.attribute, probes, target, seed, indicator_for)

    def _expand_numeric_only(self, decl: NumericOnlyDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("not_a_number")
        probe = numeric_only_probe()
        cases: list[TestCase] = []
        for attribute in decl.attributes:
            generated = assert_probe(target, attribute, probe, message, seed=seed)
            cases.extend(_nest(generated, f"only allows numeric values for {attribute}"))
        return cases

    def _expand_inclusion(self, decl: InclusionDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("inclusion")
        cases: list[TestCase] = []
        for value in decl.allowed:
            generated = assert_good_value(target, decl.attribute, value, message, seed=seed)
            cases.extend(_nest(generated, f"allows {decl.attribute} to be set to {value!r}"))
        for value in decl.bad_values:
            generated = assert_bad_value(target, decl.attribute, value, message, seed=seed)
            cases.extend(_nest(generated, f"doesn't allow {decl.attribute} to be set to {value!r}"))
        return cases

    def _expand_acceptance(self, decl: AcceptanceDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("accepted")
        cases: list[TestCase] = []
        for attribute in decl.attributes:
            generated = assert_bad_value(target, attribute, False, message, seed=seed)
            cases.extend(_nest(generated, f"requires {attribute} to be accepted"))
        return cases

    def _expand_allow_values(self, decl: AllowValuesDeclaration, target: Any, seed: Any) -> list[TestCase]:
        cases: list[TestCase] = []
        for value in decl.values:
            generated = assert_good_value(target, decl.attribute, value, ANY_ERROR, seed=seed)
            cases.extend(_nest(generated, f"allows {decl.attribute} to be set to {value!r}"))
        return cases

    def _expand_disallow_values(self, decl: DisallowValuesDeclaration, target: Any, seed: Any) -> list[TestCase]:
        message = decl.message or self.messages.indicator("invalid")
        cases: list[TestCase] = []
        for value in decl.values:
            generated = assert_bad_value(target, decl.attribute, value, message, seed=seed)
            cases.extend(_nest(generated, f"doesn't allow {decl.attribute} to be set to {value!r}"))
        return cases

    # =========================================================================
    # Uniqueness
    # =========================================================================

    def _expand_uniqueness(
        self,
        decl: UniquenessDeclaration,
        target: Any,
        seed: Any,
        existing: Any,
    ) -> list[TestCase]:
        message = decl.message or self.messages.indicator("taken")
        model_name = _name_of(target)
        if existing is None:
            first_record = getattr(target, "first_record", None)
            existing = first_record() if callable(first_record) else None

        cases: list[TestCase] = []
        for attribute in decl.attributes:
            group = f"requires unique value for {attribute}"
            if decl.scoped_to:
                group += f" scoped to {', '.join(decl.scoped_to)}"
            generated = self._uniqueness_cases(decl, attribute, target, seed, existing, message, model_name)
            cases.extend(_nest(generated, group))
        return cases

    def _uniqueness_cases(
        self,
        decl: UniquenessDeclaration,
        attribute: str,
        target: Any,
        seed: Any,
        existing: Any,
        message: ErrorIndicator,
        model_name: str,
    ) -> list[TestCase]:
        def has_record() -> None:
            assert existing is not None, f"No existing {model_name} record to compare {attribute} against"

        cases = [_check(f"should have one {model_name} record in the database in order to test", has_record)]
        if existing is None:
            # The failing check above is the signal; the rest cannot be built.
            logger.warning(
                "No existing %s record; skipping uniqueness checks for %s", model_name, attribute
            )
            return cases

        existing_value = getattr(existing, attribute)
        scope_values = {s: getattr(existing, s) for s in decl.scoped_to}

        for scope in decl.scoped_to:

            def has_scope(scope: str = scope) -> None:
                entity = resolve_entity(target, seed)
                assert hasattr(entity, scope), f"{model_name} has no {scope} attribute"

            cases.append(_check(f"should have a {scope} attribute", has_scope))

        def same_scope(entity: Any) -> None:
            for name, value in scope_values.items():
                setattr(entity, name, value)

        cases.extend(assert_bad_value(target, attribute, existing_value, message, seed=seed, prepare=same_scope))

        for scope in decl.scoped_to:
            alternate = self._scope_alternate(decl, scope, scope_values[scope])

            def other_scope(entity: Any, scope: str = scope, alternate: Any = alternate) -> None:
                same_scope(entity)
                setattr(entity, scope, alternate)

            generated = assert_good_value(target, attribute, existing_value, message, seed=seed, prepare=other_scope)
            cases.extend(_nest(generated, f"with a different {scope}"))
        return cases

    @staticmethod
    def _scope_alternate(decl: UniquenessDeclaration, scope: str, current: Any) -> Any:
        if scope in decl.scope_alternates:
            return decl.scope_alternates[scope]
        # A missing scope value is assumed to be a foreign key
        if current is None:
            return 1
        if isinstance(current, int) and not isinstance(current, bool):
            return current + 1
        raise ConfigurationError(
            f"Cannot derive a different value for scope '{scope}' from {current!r}; "
            f"pass scope_alternates={{'{scope}': ...}}"
        )

    # =========================================================================
    # Attribute metadata
    # =========================================================================

    def _expand_protected(self, decl: ProtectedDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        cases: list[TestCase] = []
        for attribute in decl.attributes:

            def protected(attribute: str = attribute) -> None:
                protected_attrs = list(target.protected_attributes() or [])
                accessible = list(target.accessible_attributes() or [])
                assert attribute in protected_attrs or (accessible and attribute not in accessible), (
                    f"{attribute} can be set by mass assignment"
                )

            cases.append(_check("should be protected", protected).within(f"protects {attribute} from mass updates"))
        return cases

    def _expand_readonly(self, decl: ReadonlyDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        cases: list[TestCase] = []
        for attribute in decl.attributes:

            def readonly(attribute: str = attribute) -> None:
                readonly_attrs = list(target.readonly_attributes() or [])
                assert attribute in readonly_attrs, f"{attribute} is not read-only, got {readonly_attrs!r}"

            cases.append(_check("should be read-only", readonly).within(f"makes {attribute} read-only"))
        return cases

    def _expand_class_methods(self, decl: ClassMethodsDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        cases: list[TestCase] = []
        for name in decl.names:

            def responds(name: str = name) -> None:
                assert hasattr(target, name), f"{_name_of(target)} does not respond to {name}"

            cases.append(_check("should respond", responds).within(f"responds to class method #{name}"))
        return cases

    def _expand_instance_methods(self, decl: InstanceMethodsDeclaration, target: Any, seed: Any) -> list[TestCase]:
        cases: list[TestCase] = []
        for name in decl.names:

            def responds(name: str = name) -> None:
                entity = resolve_entity(target, seed)
                assert hasattr(entity, name), f"{_name_of(target)} instances do not respond to {name}"

            cases.append(_check("should respond", responds).within(f"responds to instance method #{name}"))
        return cases

    # =========================================================================
    # Columns, indexes and scopes
    # =========================================================================

    def _expand_db_columns(self, decl: DbColumnsDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        cases: list[TestCase] = []
        for name in decl.names:
            group = f"has column {name}"
            if decl.type:
                group += f" of type {decl.type}"

            def has_column(name: str = name) -> None:
                column = find_column(target, name)
                assert column is not None, f"{_name_of(target)} has no column {name}"
                if decl.type:
                    assert column.type == decl.type, f"Column {name} has type {column.type!r}, expected {decl.type!r}"

            cases.append(_check("should have column", has_column).within(group))
        return cases

    def _expand_db_column(self, decl: DbColumnDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        options = decl.options.checked()
        group = f"has column named {decl.name}"
        if options:
            group += f" with options {options!r}"
        model_name = _name_of(target)

        def has_column() -> None:
            assert find_column(target, decl.name) is not None, f"{model_name} has no column {decl.name}"

        cases = [_check("should have column", has_column)]
        for option, expected in options.items():

            def matches(option: str = option, expected: Any = expected) -> None:
                column = find_column(target, decl.name)
                assert column is not None, f"{model_name} has no column {decl.name}"
                actual = getattr(column, option)
                assert str(actual) == str(expected), (
                    f"Column {decl.name} option {option} is {actual!r}, expected {expected!r}"
                )

            cases.append(
                _check(f"should have {decl.name} column on table for {model_name} match option {option}", matches)
            )
        return _nest(cases, group)

    def _expand_indices(self, decl: IndicesDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        table = default_table_name(target)
        cases: list[TestCase] = []
        for columns in decl.columns:

            def indexed(columns: tuple[str, ...] = columns) -> None:
                indexes = [tuple(index.columns) for index in target.describe_indexes()]
                assert columns in indexes, f"No index on {table} for {list(columns)!r}, found {indexes!r}"

            cases.append(_check("should have index", indexed).within(f"has index on {table} for {list(columns)!r}"))
        return cases

    def _expand_named_scope(self, decl: NamedScopeDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        call = f"{decl.scope}({', '.join(repr(a) for a in decl.args)})"

        def invoke() -> Any:
            return getattr(target, decl.scope)(*decl.args)

        def returns_scope() -> None:
            result = invoke()
            assert isinstance(result, ScopeLike), f"{call} returned {result!r}, not a scope object"

        cases = [_check("should return a scope object", returns_scope).within("return a scope object")]
        if decl.expected_options:

            def scoped() -> None:
                options = dict(invoke().options)
                assert options == decl.expected_options, f"{call} is scoped to {options!r}"

            cases.append(
                _check("should have matching options", scoped).within(f"scope itself to {decl.expected_options!r}")
            )
        return _nest(cases, call)

    # =========================================================================
    # Associations
    # =========================================================================

    def _expand_association(self, decl: AssociationDeclaration, target: Any, seed: Any) -> list[TestCase]:  # noqa: ARG002
        cases: list[TestCase] = []
        for name in decl.names:
            group = self._association_group(decl, name)
            reflection = target.describe_relationship(name)
            cases.extend(_nest(self._association_cases(decl, name, target, reflection), group))
        return cases

    @staticmethod
    def _association_group(decl: AssociationDeclaration, name: str) -> str:
        label = decl.relationship.value.replace("_", " ")
        group = f"{label} {name}"
        if decl.through:
            group += f" through {decl.through}"
        if decl.dependent:
            group += f" dependent {decl.dependent}"
        return group

    def _association_cases(
        self,
        decl: AssociationDeclaration,
        name: str,
        target: Any,
        reflection: RelationshipInfo | None,
    ) -> list[TestCase]:
        kind = decl.relationship

        def has_relationship() -> None:
            assert reflection is not None, f"{_name_of(target)} has no relationship {name}"
            assert reflection.kind == kind, f"{name} is a {reflection.kind.value} relationship, expected {kind.value}"

        cases = [_check("should have a relationship", has_relationship)]
        if reflection is None:
            return cases

        if decl.through:
            through = decl.through
            through_reflection = target.describe_relationship(through)

            def has_through() -> None:
                assert through_reflection is not None, f"{_name_of(target)} has no relationship {through}"
                assert reflection.through == through, f"{name} goes through {reflection.through!r}"

            cases.append(_check(f"should have relationship to {through}", has_through))

        if decl.dependent:
            dependent = decl.dependent

            def is_dependent() -> None:
                assert str(reflection.dependent) == dependent, (
                    f"{name} is dependent on {reflection.dependent!r}, expected {dependent!r}"
                )

            cases.append(_check(f"should have {name} be dependent on {dependent}", is_dependent))

        if decl.check_keys:
            cases.extend(self._key_cases(name, target, reflection))
        return cases

    def _key_cases(self, name: str, target: Any, reflection: RelationshipInfo) -> list[TestCase]:
        owner = _name_of(target)
        associated = reflection.target
        associated_name = associated.__name__ if isinstance(associated, type) else name

        def columns_of(model: Any) -> list[str]:
            assert model is not None, f"Relationship {name} does not name its target type"
            return column_names(model)

        kind = reflection.kind
        cases: list[TestCase] = []

        if kind == RelationshipKind.HAS_MANY and not reflection.through:
            if reflection.foreign_key:
                fk = reflection.foreign_key
            elif reflection.as_:
                fk = f"{reflection.as_}_id"
            else:
                fk = foreign_key_for(owner)

            def has_foreign_key() -> None:
                assert fk in columns_of(associated), f"{associated_name} has no {fk} column"

            cases.append(_check(f"should have {associated_name} with {fk} as a foreign key", has_foreign_key))

        elif kind == RelationshipKind.HAS_ONE:
            if reflection.foreign_key:
                fk = reflection.foreign_key
            elif reflection.as_:
                fk = f"{reflection.as_}_id"
                fk_type = f"{reflection.as_}_type"

                def has_type_column() -> None:
                    assert fk_type in columns_of(associated), f"{associated_name} has no {fk_type} column"

                cases.append(_check(f"{associated_name} should have a {fk_type} column", has_type_column))
            else:
                fk = foreign_key_for(owner)

            def has_foreign_key() -> None:
                assert fk in columns_of(associated), f"{associated_name} has no {fk} column"

            cases.append(_check(f"should have {associated_name} have a {fk} foreign key", has_foreign_key))

        elif kind == RelationshipKind.HAS_AND_BELONGS_TO_MANY:
            table = reflection.join_table or self._default_join_table(target, associated, name)

            def join_table_exists() -> None:
                tables = list(target.table_names())
                assert table in tables, f"Join table {table} does not exist, found {tables!r}"

            cases.append(_check(f"should have table {table} exist", join_table_exists))

        elif kind == RelationshipKind.BELONGS_TO and not reflection.polymorphic:
            fk = reflection.foreign_key or f"{name}_id"

            def owner_has_foreign_key() -> None:
                assert fk in column_names(target), f"{owner} has no {fk} column"

            cases.append(_check(f"should have a {fk} foreign key", owner_has_foreign_key))

        return cases

    @staticmethod
    def _default_join_table(target: Any, associated: Any, name: str) -> str:
        own = default_table_name(target)
        other = default_table_name(associated) if isinstance(associated, type) else name
        return "_".join(sorted([own, other]))
