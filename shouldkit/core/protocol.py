"""
The good/bad value assertion protocol.

Both assertions assign a probe value to an attribute, trigger validation
and inspect the attribute's errors. Every generated case resolves its own
entity and repeats the assignment, so cases can run in any order and a
failing sub-check never masks the others.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any

from shouldkit.core.matching import (
    containment_failure,
    contains_error,
    describe_indicator,
    exclusion_failure,
    normalize_errors,
)
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import ANY_ERROR, ErrorIndicator, ExpectedOutcome, TestCase
from shouldkit.core.probes import ProbeValue

logger = logging.getLogger(__name__)

# Called on the resolved entity before the probe value is assigned.
Prepare = Callable[[Any], None]


def resolve_entity(target: Any, seed: Any = None) -> Any:
    """
    Produce a fresh entity to assert against.

    If ``target`` is a type, the explicit ``seed`` wins: an instance is
    deep-copied and a zero-argument factory is called. Without a seed a bare
    instance of the type is constructed. A live instance passed as
    ``target`` is deep-copied so mutations stay local to one case.
    """
    if isinstance(target, type):
        if seed is None:
            logger.debug("No seed for %s, constructing a bare instance", target.__name__)
            return target()
        if isinstance(seed, target):
            return copy.deepcopy(seed)
        if callable(seed):
            return seed()
        return copy.deepcopy(seed)
    return copy.deepcopy(target)


def _assign_and_validate(
    target: Any,
    attribute: str,
    value: Any,
    seed: Any,
    prepare: Prepare | None,
) -> tuple[Any, bool]:
    entity = resolve_entity(target, seed)
    if prepare is not None:
        prepare(entity)
    setattr(entity, attribute, value)
    valid = bool(entity.is_valid())
    return entity, valid


def assert_good_value(
    target: Any,
    attribute: str,
    value: Any,
    error_to_avoid: ErrorIndicator = ANY_ERROR,
    *,
    seed: Any = None,
    prepare: Prepare | None = None,
    probe: ProbeValue | None = None,
) -> list[TestCase]:
    """
    Assert that ``value`` does not produce ``error_to_avoid`` on ``attribute``.

    The default indicator matches any message, so by default the attribute
    must have no errors at all.

    Returns:
        Exactly one TestCase.
    """
    suffix = f"when set to {value!r}"

    def procedure() -> None:
        entity, _ = _assign_and_validate(target, attribute, value, seed, prepare)
        errors = entity.errors_on(attribute)
        assert not contains_error(errors, error_to_avoid), (
            f"{exclusion_failure(attribute, errors, error_to_avoid)} {suffix}"
        )

    return [
        TestCase(
            description=f"should not have error {describe_indicator(error_to_avoid)} {suffix}",
            procedure=procedure,
            expected=ExpectedOutcome.ACCEPTED,
            probe=probe,
        )
    ]


def assert_bad_value(
    target: Any,
    attribute: str,
    value: Any,
    error_to_expect: ErrorIndicator | None = None,
    *,
    messages: ErrorMessages | None = None,
    seed: Any = None,
    prepare: Prepare | None = None,
    probe: ProbeValue | None = None,
) -> list[TestCase]:
    """
    Assert that ``value`` is rejected with ``error_to_expect`` on ``attribute``.

    Without an explicit indicator the ``invalid`` message is expected.

    Returns:
        Exactly three TestCases: the entity is invalid, the attribute has
        errors, and the attribute's errors contain the indicator.
    """
    if error_to_expect is None:
        error_to_expect = (messages or ErrorMessages()).indicator("invalid")
    indicator = error_to_expect
    shown = repr(value)

    def invalid_procedure() -> None:
        _, valid = _assign_and_validate(target, attribute, value, seed, prepare)
        assert not valid, f"Expected {shown} to be rejected for {attribute}, but the entity is valid"

    def has_errors_procedure() -> None:
        entity, _ = _assign_and_validate(target, attribute, value, seed, prepare)
        errors = normalize_errors(entity.errors_on(attribute))
        assert errors, f"Expected errors on {attribute} after setting it to {shown}, got none"

    def contains_procedure() -> None:
        entity, _ = _assign_and_validate(target, attribute, value, seed, prepare)
        errors = entity.errors_on(attribute)
        assert contains_error(errors, indicator), (
            f"{containment_failure(attribute, errors, indicator)} when set to {shown}"
        )

    return [
        TestCase(
            description=f"should not allow {shown} as a value for {attribute}",
            procedure=invalid_procedure,
            expected=ExpectedOutcome.REJECTED,
            probe=probe,
        ),
        TestCase(
            description=f"should have errors on {attribute} after being set to {shown}",
            procedure=has_errors_procedure,
            expected=ExpectedOutcome.REJECTED,
            probe=probe,
        ),
        TestCase(
            description=f"should have error {describe_indicator(indicator)} when set to {shown}",
            procedure=contains_procedure,
            expected=ExpectedOutcome.REJECTED,
            probe=probe,
        ),
    ]


def assert_probe(
    target: Any,
    attribute: str,
    probe: ProbeValue,
    indicator: ErrorIndicator,
    *,
    seed: Any = None,
    prepare: Prepare | None = None,
) -> list[TestCase]:
    """Dispatch a tagged probe to the good or bad assertion."""
    if probe.valid:
        return assert_good_value(
            target, attribute, probe.value, indicator, seed=seed, prepare=prepare, probe=probe
        )
    return assert_bad_value(
        target, attribute, probe.value, indicator, seed=seed, prepare=prepare, probe=probe
    )
