"""
Example groups: where generated cases are collected and handed to pytest.

A MacroGroup keeps its cases in declaration order and tracks the nesting
of ``describe`` blocks. Cases leave the group either through
``parametrize()`` (one parametrized test function) or ``as_test_class()``
(a class of ``test_*`` methods pytest collects).
"""

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from shouldkit.core.errors import ConfigurationError
from shouldkit.core.models import CaseResult, TestCase, run_cases

logger = logging.getLogger(__name__)


def _slug(text: str) -> str:
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", text).strip("_").lower()
    return slug or "case"


class MacroGroup:
    """
    An ordered group of generated test cases.

    Usage:
        group = MacroGroup("User")
        with group.describe("when saved"):
            group.add(case)
        TestUser = group.as_test_class("TestUser")
    """

    def __init__(self, description: str = ""):
        """Initialize an empty group."""
        self.description = description
        self._cases: list[TestCase] = []
        self._stack: list[str] = []
        self._acting: Callable[[], Any] | None = None

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    @contextmanager
    def describe(self, description: str) -> Iterator["MacroGroup"]:
        """Nest every case added inside the block under ``description``."""
        self._stack.append(description)
        try:
            yield self
        finally:
            self._stack.pop()

    def add(self, case: TestCase) -> TestCase:
        """Register one case under the current nesting."""
        nested = case.within(*self._outer_groups())
        self._cases.append(nested)
        return nested

    def extend(self, cases: list[TestCase]) -> list[TestCase]:
        """Register several cases under the current nesting."""
        return [self.add(case) for case in cases]

    def it(self, description: str, procedure: Callable[[], Any]) -> TestCase:
        """Register a hand-written case."""
        return self.add(TestCase(description=description, procedure=procedure))

    def _outer_groups(self) -> tuple[str, ...]:
        groups = [self.description] if self.description else []
        return (*groups, *self._stack)

    # -------------------------------------------------------------------------
    # Acting
    # -------------------------------------------------------------------------

    def act(self, block: Callable[[], Any]) -> Callable[[], Any]:
        """
        Set the action every acting case performs first.

        Returns the block so it can be used as a decorator.
        """
        self._acting = block
        return block

    @property
    def acting_block(self) -> Callable[[], Any] | None:
        return self._acting

    def do_act(self) -> Any:
        """
        Perform the action.

        Raises:
            ConfigurationError: If no action was set with ``act``.
        """
        if self._acting is None:
            raise ConfigurationError(f"No action set for {self.description or 'this group'}; call act() first")
        return self._acting()

    # -------------------------------------------------------------------------
    # Handing off
    # -------------------------------------------------------------------------

    @property
    def cases(self) -> list[TestCase]:
        """A copy of the registered cases."""
        return list(self._cases)

    def __len__(self) -> int:
        return len(self._cases)

    def __iter__(self) -> Iterator[TestCase]:
        return iter(list(self._cases))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r}, {len(self._cases)} cases)"

    def parametrize(self, argname: str = "case") -> Any:
        """
        Build a ``pytest.mark.parametrize`` decorator over the cases.

        Usage:
            @group.parametrize()
            def test_user(case):
                case.run()
        """
        import pytest

        cases = self.cases
        return pytest.mark.parametrize(argname, cases, ids=[c.full_description for c in cases])

    def as_test_class(self, name: str | None = None) -> type:
        """
        Build a class with one ``test_*`` method per case.

        Assign the result to a module-level ``Test*`` name so pytest collects it.
        """
        namespace: dict[str, Any] = {"__doc__": self.description or None}
        seen: dict[str, int] = {}
        for case in self._cases:
            base = f"test_{_slug(case.full_description)}"
            count = seen.get(base, 0)
            seen[base] = count + 1
            method_name = base if count == 0 else f"{base}_{count + 1}"
            namespace[method_name] = self._make_method(case)

        class_name = name or f"Test{re.sub(r'[^0-9a-zA-Z]', '', self.description.title()) or 'Macros'}"
        logger.debug("Built %s with %d test methods", class_name, len(self._cases))
        return type(class_name, (), namespace)

    @staticmethod
    def _make_method(case: TestCase) -> Callable[[Any], None]:
        def method(self: Any) -> None:  # noqa: ARG001
            case.run()

        method.__doc__ = case.full_description
        return method

    def run(self) -> list[CaseResult]:
        """Run every case outside pytest."""
        return run_cases(self._cases)
