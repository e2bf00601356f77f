"""Tests for boundary-value probe generation."""

from decimal import Decimal

import pytest

from shouldkit.core.errors import ConfigurationError, InvalidRangeError
from shouldkit.core.probes import (
    NON_NUMERIC_PROBE,
    ProbeKind,
    generate_exact_length_probes,
    generate_length_range_probes,
    generate_minimum_length_probes,
    generate_value_range_probes,
    numeric_only_probe,
)


class TestLengthRangeProbes:
    """Tests for generate_length_range_probes."""

    def test_probes_both_ends(self):
        """Test the four probes of an ordinary range."""
        probes = generate_length_range_probes(3, 10)

        assert [p.kind for p in probes.probes] == [
            ProbeKind.TOO_SHORT,
            ProbeKind.AT_MIN,
            ProbeKind.TOO_LONG,
            ProbeKind.AT_MAX,
        ]
        assert probes.get(ProbeKind.TOO_SHORT).value == "xx"
        assert probes.get(ProbeKind.AT_MIN).value == "xxx"
        assert len(probes.get(ProbeKind.TOO_LONG).value) == 11
        assert len(probes.get(ProbeKind.AT_MAX).value) == 10

    def test_validity_tags(self):
        """Test that probes inside the range are tagged valid."""
        probes = generate_length_range_probes(3, 10)

        assert [len(p.value) for p in probes.valid] == [3, 10]
        assert [len(p.value) for p in probes.invalid] == [2, 11]

    def test_zero_minimum_omits_short_probes(self):
        """Test that a zero minimum has no too-short probe."""
        probes = generate_length_range_probes(0, 5)

        assert probes.get(ProbeKind.TOO_SHORT) is None
        assert probes.get(ProbeKind.AT_MIN) is None
        assert [p.kind for p in probes.probes] == [ProbeKind.TOO_LONG, ProbeKind.AT_MAX]

    def test_degenerate_range_yields_single_exact_probe(self):
        """Test that min == max produces one good probe, not two."""
        probes = generate_length_range_probes(4, 4)

        assert len(probes.valid) == 1
        assert probes.valid[0].kind == ProbeKind.EXACT
        assert probes.valid[0].value == "xxxx"
        assert [len(p.value) for p in probes.invalid] == [3, 5]

    def test_degenerate_zero_range(self):
        """Test a range of exactly zero characters."""
        probes = generate_length_range_probes(0, 0)

        assert [p.value for p in probes.probes] == ["x", ""]
        assert probes.get(ProbeKind.EXACT).valid is True

    def test_descriptions(self):
        """Test the human-readable probe descriptions."""
        probes = generate_length_range_probes(3, 10)

        assert probes.get(ProbeKind.TOO_SHORT).description == "less than 3 chars long"
        assert probes.get(ProbeKind.AT_MIN).description == "exactly 3 chars long"
        assert probes.get(ProbeKind.TOO_LONG).description == "more than 10 chars long"

    def test_reversed_bounds(self):
        """Test that a reversed range is rejected."""
        with pytest.raises(InvalidRangeError) as exc_info:
            generate_length_range_probes(10, 3)

        assert exc_info.value.minimum == 10
        assert exc_info.value.maximum == 3

    @pytest.mark.parametrize("bad", [-1, 2.5, "3", True])
    def test_rejects_non_length_bounds(self, bad):
        """Test that bounds must be non-negative integers."""
        with pytest.raises(ConfigurationError):
            generate_length_range_probes(bad, 10)

    @pytest.mark.parametrize(("minimum", "maximum"), [(1, 2), (3, 10), (5, 6), (0, 1), (7, 7)])
    def test_probes_sit_on_or_just_past_bounds(self, minimum, maximum):
        """Test every probe is at a bound or one past it, tagged accordingly."""
        for probe in generate_length_range_probes(minimum, maximum).probes:
            length = len(probe.value)
            assert length in (minimum - 1, minimum, maximum, maximum + 1)
            assert probe.valid == (minimum <= length <= maximum)
            assert set(probe.value) <= {"x"}


class TestMinimumLengthProbes:
    """Tests for generate_minimum_length_probes."""

    def test_minimum(self):
        """Test the two probes of a minimum length."""
        probes = generate_minimum_length_probes(3)

        assert [(p.value, p.valid) for p in probes.probes] == [("xx", False), ("xxx", True)]
        assert probes.get(ProbeKind.AT_MIN).description == "at least 3 chars long"

    def test_zero_minimum(self):
        """Test that a zero minimum only has the good probe."""
        probes = generate_minimum_length_probes(0)

        assert len(probes) == 1
        assert probes.probes[0].value == ""
        assert probes.probes[0].valid is True


class TestExactLengthProbes:
    """Tests for generate_exact_length_probes."""

    def test_exact(self):
        """Test probes around an exact length."""
        probes = generate_exact_length_probes(9)

        assert [(len(p.value), p.valid) for p in probes.probes] == [(8, False), (10, False), (9, True)]

    def test_zero_length_rejected(self):
        """Test that an exact length of zero cannot be probed."""
        with pytest.raises(ConfigurationError, match="at least 1"):
            generate_exact_length_probes(0)


class TestValueRangeProbes:
    """Tests for generate_value_range_probes."""

    def test_integer_range(self):
        """Test that integer ranges step by one."""
        probes = generate_value_range_probes(0, 120)

        assert [(p.value, p.valid) for p in probes.probes] == [
            (-1, False),
            (0, True),
            (121, False),
            (120, True),
        ]
        assert probes.get(ProbeKind.BELOW_MIN).description == "less than 0"
        assert probes.get(ProbeKind.ABOVE_MAX).description == "more than 120"

    def test_fractional_range_needs_step(self):
        """Test that float bounds without a step are rejected."""
        with pytest.raises(ConfigurationError, match="explicit step"):
            generate_value_range_probes(0.0, 1.0)

    def test_fractional_range_with_step(self):
        """Test a decimal range probed by its step."""
        probes = generate_value_range_probes(Decimal("0.0"), Decimal("1.0"), Decimal("0.1"))

        assert probes.get(ProbeKind.BELOW_MIN).value == Decimal("-0.1")
        assert probes.get(ProbeKind.ABOVE_MAX).value == Decimal("1.1")

    def test_decimal_bounds_with_float_step(self):
        """Test that a float step is converted for decimal bounds."""
        probes = generate_value_range_probes(Decimal("0"), Decimal("1"), 0.1)

        assert probes.get(ProbeKind.BELOW_MIN).value == Decimal("-0.1")
        assert probes.get(ProbeKind.ABOVE_MAX).value == Decimal("1.1")

    def test_mixed_decimal_and_float_bounds(self):
        with pytest.raises(ConfigurationError, match="mix Decimal and float"):
            generate_value_range_probes(Decimal("0"), 1.5, 0.5)

    def test_decimal_step_with_float_bounds(self):
        with pytest.raises(ConfigurationError, match="float bounds"):
            generate_value_range_probes(0.0, 1.0, Decimal("0.1"))

    def test_non_numeric_step(self):
        with pytest.raises(ConfigurationError, match="Step must be numeric"):
            generate_value_range_probes(0, 10, "1")

    def test_single_value_range(self):
        """Test that min == max is still a valid range."""
        probes = generate_value_range_probes(5, 5)

        assert [p.value for p in probes.valid] == [5, 5]

    def test_reversed_bounds(self):
        """Test that a reversed value range is rejected."""
        with pytest.raises(InvalidRangeError):
            generate_value_range_probes(10, 1)

    def test_non_numeric_bounds(self):
        """Test that bounds must be numbers."""
        with pytest.raises(ConfigurationError, match="numeric"):
            generate_value_range_probes("a", "z")

    def test_non_positive_step(self):
        """Test that the step must be positive."""
        with pytest.raises(ConfigurationError, match="positive"):
            generate_value_range_probes(0, 10, 0)


class TestNumericOnlyProbe:
    """Tests for numeric_only_probe."""

    def test_probe(self):
        """Test the fixed non-numeric probe."""
        probe = numeric_only_probe()

        assert probe.value == NON_NUMERIC_PROBE == "abcd"
        assert probe.valid is False
        assert probe.kind == ProbeKind.NON_NUMERIC
