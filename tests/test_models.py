"""Tests for generated test cases and results."""

import yaml

from shouldkit.core.models import CaseResult, ExpectedOutcome, TestCase, run_case


def noop():
    return None


class TestTestCase:
    """Tests for TestCase."""

    def test_defaults(self):
        case = TestCase(description="should respond", procedure=noop)

        assert case.expected == ExpectedOutcome.SATISFIED
        assert case.group == ()
        assert case.full_description == "should respond"

    def test_within_prepends_groups(self):
        case = TestCase(description="should respond", procedure=noop, group=("#active",))
        nested = case.within("User", "class methods")

        assert nested.group == ("User", "class methods", "#active")
        assert nested.full_description == "User class methods #active should respond"
        assert case.group == ("#active",)

    def test_tagged_keeps_tags_when_nested(self):
        case = TestCase(description="x", procedure=noop).tagged("presence")

        assert case.tags == ("presence",)
        assert case.within("User").tagged("slow").tags == ("presence", "slow")

    def test_repr(self):
        case = TestCase(description="x", procedure=noop, expected=ExpectedOutcome.REJECTED)

        assert repr(case) == "TestCase('x', expected=rejected)"

    def test_not_collected_by_pytest(self):
        assert TestCase.__test__ is False


class TestRunCase:
    """Tests for run_case."""

    def test_passing(self):
        result = run_case(TestCase(description="ok", procedure=noop, group=("g",)))

        assert result.passed is True
        assert result.description == "g ok"
        assert result.message == ""
        assert result.tags == []

    def test_result_carries_tags(self):
        result = run_case(TestCase(description="ok", procedure=noop, tags=("uniqueness",)))

        assert result.tags == ["uniqueness"]

    def test_assertion_without_message(self):
        def fails():
            raise AssertionError

        result = run_case(TestCase(description="fails", procedure=fails))

        assert result.passed is False
        assert result.message == "assertion failed"

    def test_result_yaml(self):
        result = CaseResult(description="g ok", passed=False, expected=ExpectedOutcome.ACCEPTED, message="boom")
        data = yaml.safe_load(result.to_yaml())

        assert data["expected"] == "accepted"
        assert data["message"] == "boom"
