"""
shouldkit core.

Boundary-value generation, the good/bad value assertion protocol, typed
declarations and the expander that turns declarations into test cases.
"""

from shouldkit.core.declarations import (
    AcceptanceDeclaration,
    AllowValuesDeclaration,
    AssociationDeclaration,
    ClassMethodsDeclaration,
    ColumnExpectation,
    DbColumnDeclaration,
    DbColumnsDeclaration,
    Declaration,
    DeclarationBase,
    DeclarationFile,
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
    parse_declaration,
)
from shouldkit.core.errors import (
    ConfigurationError,
    InvalidRangeError,
    ShouldkitError,
    TargetResolutionError,
    UnsupportedOptionError,
)
from shouldkit.core.expander import Expander
from shouldkit.core.matching import contains_error, describe_indicator
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import (
    ANY_ERROR,
    CaseResult,
    ErrorIndicator,
    ExpectedOutcome,
    TestCase,
    run_cases,
)
from shouldkit.core.probes import (
    ProbeKind,
    ProbeSet,
    ProbeValue,
    generate_exact_length_probes,
    generate_length_range_probes,
    generate_minimum_length_probes,
    generate_value_range_probes,
    numeric_only_probe,
)
from shouldkit.core.protocol import assert_bad_value, assert_good_value, resolve_entity
from shouldkit.core.reflection import (
    ColumnInfo,
    IndexInfo,
    ReflectedModel,
    RelationshipInfo,
    RelationshipKind,
    ScopeLike,
    ValidatableEntity,
)

__all__ = [
    # Declarations
    "AcceptanceDeclaration",
    "AllowValuesDeclaration",
    "AssociationDeclaration",
    "ClassMethodsDeclaration",
    "ColumnExpectation",
    "DbColumnDeclaration",
    "DbColumnsDeclaration",
    "Declaration",
    "DeclarationBase",
    "DeclarationFile",
    "DisallowValuesDeclaration",
    "InclusionDeclaration",
    "IndicesDeclaration",
    "InstanceMethodsDeclaration",
    "LengthExactDeclaration",
    "LengthMinimumDeclaration",
    "LengthRangeDeclaration",
    "NamedScopeDeclaration",
    "NumericOnlyDeclaration",
    "PresenceDeclaration",
    "ProtectedDeclaration",
    "ReadonlyDeclaration",
    "UniquenessDeclaration",
    "ValueRangeDeclaration",
    "parse_declaration",
    # Errors
    "ConfigurationError",
    "InvalidRangeError",
    "ShouldkitError",
    "TargetResolutionError",
    "UnsupportedOptionError",
    # Expansion and assertions
    "Expander",
    "assert_bad_value",
    "assert_good_value",
    "resolve_entity",
    "contains_error",
    "describe_indicator",
    "ErrorMessages",
    # Cases
    "ANY_ERROR",
    "CaseResult",
    "ErrorIndicator",
    "ExpectedOutcome",
    "TestCase",
    "run_cases",
    # Probes
    "ProbeKind",
    "ProbeSet",
    "ProbeValue",
    "generate_exact_length_probes",
    "generate_length_range_probes",
    "generate_minimum_length_probes",
    "generate_value_range_probes",
    "numeric_only_probe",
    # Reflection
    "ColumnInfo",
    "IndexInfo",
    "ReflectedModel",
    "RelationshipInfo",
    "RelationshipKind",
    "ScopeLike",
    "ValidatableEntity",
]
