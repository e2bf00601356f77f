"""
Error-indicator matching.

A pattern indicator is contained in an error collection when at least one
entry matches it; a literal indicator only when the collection includes
that exact string. The two kinds are also described and reported
differently, so a failure message says which rule was applied.
"""

import re
from collections.abc import Iterable
from typing import Any

from shouldkit.core.models import ErrorIndicator


def normalize_errors(errors: Any) -> list[str]:
    """Coerce whatever ``errors_on`` returned into a list of messages."""
    if errors is None:
        return []
    if isinstance(errors, str):
        return [errors]
    if isinstance(errors, Iterable):
        return [str(e) for e in errors]
    return [str(errors)]


def is_pattern(indicator: ErrorIndicator) -> bool:
    return isinstance(indicator, re.Pattern)


def describe_indicator(indicator: ErrorIndicator) -> str:
    """Render an indicator for a case description: ``/pat/`` or ``'literal'``."""
    if isinstance(indicator, re.Pattern):
        return f"/{indicator.pattern}/"
    return repr(indicator)


def matching_errors(errors: Iterable[str], indicator: ErrorIndicator) -> list[str]:
    """Return the entries of ``errors`` that satisfy ``indicator``."""
    if isinstance(indicator, re.Pattern):
        return [e for e in errors if indicator.search(e)]
    return [e for e in errors if e == indicator]


def contains_error(errors: Any, indicator: ErrorIndicator) -> bool:
    """Check whether the error collection contains the indicator."""
    return bool(matching_errors(normalize_errors(errors), indicator))


def containment_failure(attribute: str, errors: Any, indicator: ErrorIndicator) -> str:
    """Failure message for an indicator that was expected but not found."""
    found = normalize_errors(errors)
    if isinstance(indicator, re.Pattern):
        return (
            f"Expected an error on {attribute} matching {describe_indicator(indicator)}, "
            f"but none of {found!r} matched"
        )
    return f"Expected errors on {attribute} to include {indicator!r}, got {found!r}"


def exclusion_failure(attribute: str, errors: Any, indicator: ErrorIndicator) -> str:
    """Failure message for an indicator that was found but should be absent."""
    found = normalize_errors(errors)
    if isinstance(indicator, re.Pattern):
        hits = matching_errors(found, indicator)
        return (
            f"Expected no error on {attribute} matching {describe_indicator(indicator)}, "
            f"but found {hits!r}"
        )
    return f"Expected errors on {attribute} not to include {indicator!r}, got {found!r}"
