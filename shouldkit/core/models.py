"""
Core models for generated test cases and their results.

A TestCase is the atomic unit handed to the test runner: a description,
a zero-argument procedure that raises ``AssertionError`` on failure, and
the outcome the procedure expects. Results are pydantic models so they
serialize the same way the rest of shouldkit does.
"""

import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from shouldkit.core.probes import ProbeValue

# A literal error message or a compiled pattern describing one.
ErrorIndicator = str | re.Pattern[str]

# The empty pattern matches every message, so "avoid ANY_ERROR" means
# "the attribute has no errors at all".
ANY_ERROR: re.Pattern[str] = re.compile("")


class ExpectedOutcome(str, Enum):
    """What a generated case expects of its target."""

    ACCEPTED = "accepted"  # probe tagged valid
    REJECTED = "rejected"  # probe tagged invalid
    SATISFIED = "satisfied"  # metadata check, no probe involved


# =============================================================================
# TestCase
# =============================================================================


@dataclass(frozen=True)
class TestCase:
    """
    A single generated test case.

    ``group`` holds the enclosing descriptions from outermost to innermost,
    so runners that support nesting can rebuild the hierarchy.
    """

    __test__ = False  # not a pytest test class

    description: str
    procedure: Callable[[], Any]
    expected: ExpectedOutcome = ExpectedOutcome.SATISFIED
    group: tuple[str, ...] = ()
    probe: "ProbeValue | None" = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def full_description(self) -> str:
        """Group descriptions and the case description joined by spaces."""
        return " ".join([*self.group, self.description])

    def within(self, *group: str) -> "TestCase":
        """Return a copy nested under additional outer groups."""
        return TestCase(
            description=self.description,
            procedure=self.procedure,
            expected=self.expected,
            group=(*group, *self.group),
            probe=self.probe,
            tags=self.tags,
        )

    def tagged(self, *tags: str) -> "TestCase":
        """Return a copy with ``tags`` added."""
        return replace(self, tags=(*self.tags, *tags))

    def run(self) -> None:
        """Execute the procedure. Raises ``AssertionError`` on failure."""
        self.procedure()

    def __repr__(self) -> str:
        return f"TestCase({self.full_description!r}, expected={self.expected.value})"


# =============================================================================
# Results
# =============================================================================


class CaseResult(BaseModel):
    """Result of executing one generated test case."""

    description: str = Field(..., description="Full description of the case")
    passed: bool = Field(..., description="Whether the case passed")
    expected: ExpectedOutcome = Field(..., description="Outcome the case expected")
    message: str = Field(default="", description="Failure or error message")
    duration_ms: int = Field(default=0, description="Execution duration in milliseconds")
    tags: list[str] = Field(default_factory=list, description="Case tags, such as the declaration kind")

    def to_yaml(self) -> str:
        """Serialize to YAML format."""
        result: str = yaml.dump(
            self.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return result


def run_case(case: TestCase) -> CaseResult:
    """
    Run one case and capture its outcome.

    Assertion failures and unexpected exceptions are both reported as a
    failed result; nothing is raised.
    """
    started = time.perf_counter()
    message = ""
    passed = True
    try:
        case.run()
    except AssertionError as e:
        passed = False
        message = str(e) or "assertion failed"
    except Exception as e:  # noqa: BLE001
        passed = False
        message = f"{type(e).__name__}: {e}"
    duration_ms = int((time.perf_counter() - started) * 1000)
    return CaseResult(
        description=case.full_description,
        passed=passed,
        expected=case.expected,
        message=message,
        duration_ms=duration_ms,
        tags=list(case.tags),
    )


def run_cases(cases: Iterable[TestCase]) -> list[CaseResult]:
    """Run every case independently, one result per case."""
    return [run_case(case) for case in cases]
