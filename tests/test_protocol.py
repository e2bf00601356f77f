"""Tests for the good/bad value assertion protocol."""

import re

import pytest
from fakes import LaxUser, User

from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import ExpectedOutcome, run_cases
from shouldkit.core.probes import generate_length_range_probes
from shouldkit.core.protocol import assert_bad_value, assert_good_value, assert_probe, resolve_entity


class TestResolveEntity:
    """Tests for resolve_entity."""

    def test_bare_instance_without_seed(self):
        entity = resolve_entity(User)

        assert isinstance(entity, User)
        assert entity.name is None

    def test_seed_instance_is_copied(self):
        """Test that a seed instance is deep-copied, never shared."""
        seed = User(name="Ada")
        entity = resolve_entity(User, seed)

        assert entity is not seed
        assert entity.name == "Ada"
        entity.name = "Grace"
        assert seed.name == "Ada"

    def test_seed_factory_is_called(self):
        entity = resolve_entity(User, lambda: User(name="Lin"))

        assert entity.name == "Lin"

    def test_live_target_is_copied(self):
        target = User(name="Ada")

        assert resolve_entity(target) is not target


class TestAssertGoodValue:
    """Tests for assert_good_value."""

    def test_one_accepting_case(self):
        """Test that a good value produces a single case."""
        cases = assert_good_value(User, "name", "Ada")

        assert len(cases) == 1
        assert cases[0].expected == ExpectedOutcome.ACCEPTED
        assert cases[0].description == "should not have error // when set to 'Ada'"

    def test_passes_when_attribute_has_no_errors(self):
        """Test that the case passes even though the entity as a whole is invalid."""
        (case,) = assert_good_value(User, "name", "Ada")

        case.run()

    def test_fails_when_error_present(self):
        (case,) = assert_good_value(User, "name", "Al")

        with pytest.raises(AssertionError, match="when set to 'Al'"):
            case.run()

    def test_ignores_other_errors(self):
        """Test that only the indicator has to be absent."""
        (case,) = assert_good_value(User, "name", "Al", "can't be blank")

        case.run()


class TestAssertBadValue:
    """Tests for assert_bad_value."""

    def test_three_rejecting_cases(self):
        """Test the three sub-checks and their descriptions."""
        cases = assert_bad_value(User, "name", "Al", "is too short (minimum is 3 characters)")

        assert [c.description for c in cases] == [
            "should not allow 'Al' as a value for name",
            "should have errors on name after being set to 'Al'",
            "should have error 'is too short (minimum is 3 characters)' when set to 'Al'",
        ]
        assert {c.expected for c in cases} == {ExpectedOutcome.REJECTED}

    def test_all_pass_against_enforcing_model(self):
        cases = assert_bad_value(User, "email", "nope", re.compile("invalid"))

        assert all(r.passed for r in run_cases(cases))

    def test_default_indicator_is_invalid_message(self):
        cases = assert_bad_value(User, "email", "nope")

        assert cases[2].description == "should have error 'is invalid' when set to 'nope'"
        assert all(r.passed for r in run_cases(cases))

    def test_default_indicator_from_message_table(self):
        messages = ErrorMessages(invalid="is not valid")
        cases = assert_bad_value(User, "email", "nope", messages=messages)

        assert cases[2].description == "should have error 'is not valid' when set to 'nope'"

    def test_sub_checks_fail_independently(self):
        """Test that each sub-check reports on its own against a model with no validations."""
        results = run_cases(assert_bad_value(LaxUser, "name", "Al", "is too short"))

        assert [r.passed for r in results] == [False, False, False]
        assert "but the entity is valid" in results[0].message
        assert "got none" in results[1].message
        assert "to include 'is too short'" in results[2].message

    def test_wrong_message_fails_only_last_check(self):
        results = run_cases(assert_bad_value(User, "name", "Al", "is too long (maximum is 10 characters)"))

        assert [r.passed for r in results] == [True, True, False]

    def test_prepare_runs_before_assignment(self):
        """Test that the prepare step shapes the entity for every case."""
        seen = []

        def prepare(entity):
            seen.append(entity)
            entity.email = "bad"

        cases = assert_bad_value(User, "name", "Ada", re.compile("."), prepare=prepare)
        results = run_cases(cases)

        assert len(seen) == 3
        assert len({id(e) for e in seen}) == 3
        # name itself is fine, so "has errors on name" fails
        assert [r.passed for r in results] == [True, False, False]


class TestAssertProbe:
    """Tests for assert_probe dispatch."""

    def test_dispatches_on_validity(self):
        probes = generate_length_range_probes(3, 10)
        good = assert_probe(User, "name", probes.valid[0], "is too short (minimum is 3 characters)")
        bad = assert_probe(User, "name", probes.invalid[0], "is too short (minimum is 3 characters)")

        assert len(good) == 1
        assert len(bad) == 3
        assert good[0].probe is probes.valid[0]
        assert all(r.passed for r in run_cases([*good, *bad]))
