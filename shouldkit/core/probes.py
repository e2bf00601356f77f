"""
Boundary-value generation for range and threshold constraints.

Every generator is pure: it turns a declared bound into the minimal set of
probe values needed to prove the bound is enforced, each tagged as
expected-valid or expected-invalid. None of them touch a target entity.
"""

from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any

from pydantic import BaseModel, Field

from shouldkit.core.errors import ConfigurationError, InvalidRangeError

PROBE_CHAR = "x"
NON_NUMERIC_PROBE = "abcd"


class ProbeKind(str, Enum):
    """Which edge of a constraint a probe exercises."""

    TOO_SHORT = "too_short"
    AT_MIN = "at_min"
    AT_MAX = "at_max"
    TOO_LONG = "too_long"
    EXACT = "exact"
    BELOW_MIN = "below_min"
    ABOVE_MAX = "above_max"
    NON_NUMERIC = "non_numeric"


class ProbeValue(BaseModel):
    """A concrete input value tagged with whether it should pass validation."""

    model_config = {"frozen": True}

    value: Any = Field(..., description="The value assigned to the attribute")
    valid: bool = Field(..., description="Whether the constraint should accept the value")
    kind: ProbeKind = Field(..., description="Edge of the constraint being probed")
    description: str = Field(default="", description="Human-readable summary of the probe")


class ProbeSet(BaseModel):
    """Ordered probes generated for one constraint."""

    model_config = {"frozen": True}

    probes: list[ProbeValue] = Field(default_factory=list)

    def get(self, kind: ProbeKind) -> ProbeValue | None:
        """Return the probe for an edge, or None if it was omitted."""
        for probe in self.probes:
            if probe.kind == kind:
                return probe
        return None

    @property
    def valid(self) -> list[ProbeValue]:
        """Probes the constraint should accept."""
        return [p for p in self.probes if p.valid]

    @property
    def invalid(self) -> list[ProbeValue]:
        """Probes the constraint should reject."""
        return [p for p in self.probes if not p.valid]

    def __len__(self) -> int:
        return len(self.probes)


def _chars(n: int) -> str:
    return PROBE_CHAR * n


def _check_length(name: str, n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise ConfigurationError(f"{name} must be an integer, got {n!r}")
    if n < 0:
        raise ConfigurationError(f"{name} must not be negative, got {n}")


# =============================================================================
# Length probes
# =============================================================================


def generate_length_range_probes(minimum: int, maximum: int) -> ProbeSet:
    """
    Probe both ends of a length range.

    Emits ``min-1`` and ``min`` characters unless ``min`` is zero,
    ``max+1`` characters always, and ``max`` characters only when it differs
    from ``min``. A degenerate range yields a single ``exact`` good probe.

    Raises:
        InvalidRangeError: If ``minimum > maximum``.
    """
    _check_length("minimum", minimum)
    _check_length("maximum", maximum)
    if minimum > maximum:
        raise InvalidRangeError(minimum, maximum)

    probes: list[ProbeValue] = []
    if minimum == maximum:
        probes.extend(_exact_probes(minimum))
        return ProbeSet(probes=probes)

    if minimum > 0:
        probes.append(
            ProbeValue(
                value=_chars(minimum - 1),
                valid=False,
                kind=ProbeKind.TOO_SHORT,
                description=f"less than {minimum} chars long",
            )
        )
        probes.append(
            ProbeValue(
                value=_chars(minimum),
                valid=True,
                kind=ProbeKind.AT_MIN,
                description=f"exactly {minimum} chars long",
            )
        )
    probes.append(
        ProbeValue(
            value=_chars(maximum + 1),
            valid=False,
            kind=ProbeKind.TOO_LONG,
            description=f"more than {maximum} chars long",
        )
    )
    probes.append(
        ProbeValue(
            value=_chars(maximum),
            valid=True,
            kind=ProbeKind.AT_MAX,
            description=f"exactly {maximum} chars long",
        )
    )
    return ProbeSet(probes=probes)


def _exact_probes(length: int) -> list[ProbeValue]:
    probes: list[ProbeValue] = []
    if length > 0:
        probes.append(
            ProbeValue(
                value=_chars(length - 1),
                valid=False,
                kind=ProbeKind.TOO_SHORT,
                description=f"less than {length} chars long",
            )
        )
    probes.append(
        ProbeValue(
            value=_chars(length + 1),
            valid=False,
            kind=ProbeKind.TOO_LONG,
            description=f"more than {length} chars long",
        )
    )
    probes.append(
        ProbeValue(
            value=_chars(length),
            valid=True,
            kind=ProbeKind.EXACT,
            description=f"exactly {length} chars long",
        )
    )
    return probes


def generate_minimum_length_probes(minimum: int) -> ProbeSet:
    """Probe a one-sided minimum length; ``too_short`` is omitted for zero."""
    _check_length("minimum", minimum)
    probes: list[ProbeValue] = []
    if minimum > 0:
        probes.append(
            ProbeValue(
                value=_chars(minimum - 1),
                valid=False,
                kind=ProbeKind.TOO_SHORT,
                description=f"less than {minimum} chars long",
            )
        )
    probes.append(
        ProbeValue(
            value=_chars(minimum),
            valid=True,
            kind=ProbeKind.AT_MIN,
            description=f"at least {minimum} chars long",
        )
    )
    return ProbeSet(probes=probes)


def generate_exact_length_probes(length: int) -> ProbeSet:
    """Probe an exact length with ``length-1``, ``length+1`` and ``length`` chars."""
    _check_length("length", length)
    if length == 0:
        raise ConfigurationError("Exact length must be at least 1 to probe a shorter value")
    return ProbeSet(probes=_exact_probes(length))


# =============================================================================
# Value probes
# =============================================================================


def _check_numeric(value: Any, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Real | Decimal):
        raise ConfigurationError(f"{what} must be numeric, got {value!r}")


def _mixes_decimal_and_float(*values: Any) -> bool:
    return any(isinstance(v, Decimal) for v in values) and any(isinstance(v, float) for v in values)


def check_numeric_bounds(minimum: Any, maximum: Any, step: Any = None) -> None:
    """
    Check that value-range bounds, and the step if given, are numbers that combine.

    A float step is accepted with Decimal bounds and converted when probing;
    Decimal and float bounds cannot be mixed.

    Raises:
        ConfigurationError: If a bound or the step is not numeric, or the types mix.
    """
    for bound in (minimum, maximum):
        _check_numeric(bound, "Value range bounds")
    if _mixes_decimal_and_float(minimum, maximum):
        raise ConfigurationError(f"Value range bounds mix Decimal and float: {minimum!r}, {maximum!r}")
    if step is not None:
        _check_numeric(step, "Step")
        if isinstance(step, Decimal) and _mixes_decimal_and_float(minimum, maximum, step):
            raise ConfigurationError(f"Decimal step {step!r} cannot be used with float bounds")


def _resolve_step(minimum: Any, maximum: Any, step: Any) -> Any:
    check_numeric_bounds(minimum, maximum, step)
    if step is None:
        if isinstance(minimum, int) and isinstance(maximum, int):
            return 1
        raise ConfigurationError(
            "Fractional value ranges need an explicit step to probe past their bounds"
        )
    if _mixes_decimal_and_float(minimum, maximum, step):
        step = Decimal(str(step))
    if step <= 0:
        raise ConfigurationError(f"Step must be positive, got {step!r}")
    return step


def generate_value_range_probes(minimum: Any, maximum: Any, step: Any = None) -> ProbeSet:
    """
    Probe a closed numeric range at ``min-step``, ``min``, ``max+step`` and ``max``.

    Integers step by one. Floats and decimals have no natural successor, so
    they need ``step``.

    Raises:
        InvalidRangeError: If ``minimum > maximum``.
        ConfigurationError: If the bounds are not numeric or a needed step is missing.
    """
    step = _resolve_step(minimum, maximum, step)
    if minimum > maximum:
        raise InvalidRangeError(minimum, maximum)

    return ProbeSet(
        probes=[
            ProbeValue(
                value=minimum - step,
                valid=False,
                kind=ProbeKind.BELOW_MIN,
                description=f"less than {minimum}",
            ),
            ProbeValue(value=minimum, valid=True, kind=ProbeKind.AT_MIN, description=f"{minimum}"),
            ProbeValue(
                value=maximum + step,
                valid=False,
                kind=ProbeKind.ABOVE_MAX,
                description=f"more than {maximum}",
            ),
            ProbeValue(value=maximum, valid=True, kind=ProbeKind.AT_MAX, description=f"{maximum}"),
        ]
    )


def numeric_only_probe() -> ProbeValue:
    """A fixed non-numeric string that numeric-only constraints must reject."""
    return ProbeValue(
        value=NON_NUMERIC_PROBE,
        valid=False,
        kind=ProbeKind.NON_NUMERIC,
        description="a non-numeric value",
    )
