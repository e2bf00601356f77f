"""Tests for the shouldkit CLI."""

import pytest
from typer.testing import CliRunner

from shouldkit import __version__
from shouldkit.cli import app, resolve_target
from shouldkit.core.errors import TargetResolutionError

runner = CliRunner()

USER_DECLARATIONS = """
target: fakes:{model}
description: User validations
declarations:
  - kind: presence
    attributes: [name]
  - kind: length_range
    attribute: name
    minimum: 3
    maximum: 10
  - kind: association
    names: [posts]
    relationship: has_many
    dependent: destroy
"""


@pytest.fixture
def declarations(tmp_path):
    def write(model="User", text=USER_DECLARATIONS):
        path = tmp_path / "declarations.yaml"
        path.write_text(text.format(model=model))
        return str(path)

    return write


class TestVersion:
    """Tests for the version option."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"v{__version__}" in result.output


class TestProbesCommand:
    """Tests for the probes command."""

    def test_length_range(self):
        result = runner.invoke(app, ["probes", "length_range", "--min", "3", "--max", "10"])

        assert result.exit_code == 0
        assert "too_short" in result.output
        assert "at_max" in result.output

    def test_value_range_with_step(self):
        result = runner.invoke(app, ["probes", "value_range", "--min", "0.5", "--max", "1.5", "--step", "0.5"])

        assert result.exit_code == 0
        assert "below_min" in result.output

    def test_numeric_only(self):
        result = runner.invoke(app, ["probes", "numeric_only"])

        assert result.exit_code == 0
        assert "abcd" in result.output

    def test_missing_bound(self):
        result = runner.invoke(app, ["probes", "length_range", "--min", "3"])

        assert result.exit_code == 1
        assert "needs --max" in result.output

    def test_reversed_bounds(self):
        result = runner.invoke(app, ["probes", "length_range", "--min", "10", "--max", "3"])

        assert result.exit_code == 1
        assert "Invalid range" in result.output

    def test_unknown_kind(self):
        result = runner.invoke(app, ["probes", "format"])

        assert result.exit_code == 1
        assert "Unknown probe kind" in result.output


class TestMessagesCommand:
    """Tests for the messages command."""

    def test_default_table(self):
        result = runner.invoke(app, ["messages"])

        assert result.exit_code == 0
        assert "too_short" in result.output

    def test_pydantic_yaml(self):
        result = runner.invoke(app, ["messages", "--preset", "pydantic", "--format", "yaml"])

        assert result.exit_code == 0
        assert "blank: Field required" in result.output

    def test_unknown_preset(self):
        result = runner.invoke(app, ["messages", "--preset", "django"])

        assert result.exit_code == 1
        assert "Unknown message preset" in result.output

    def test_from_file(self, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text("taken: is already in use\n")

        result = runner.invoke(app, ["messages", "--file", str(path), "--format", "yaml"])

        assert result.exit_code == 0
        assert "taken: is already in use" in result.output


class TestExpandCommand:
    """Tests for the expand command."""

    def test_preview(self, declarations):
        result = runner.invoke(app, ["expand", declarations()])

        assert result.exit_code == 0
        assert "14 cases against fakes:User" in result.output
        assert "requires name to be set" in result.output

    def test_run_passing(self, declarations):
        result = runner.invoke(app, ["expand", declarations(), "--run"])

        assert result.exit_code == 0
        assert "All 14 case(s) passed" in result.output

    def test_verbose_after_command(self, declarations):
        """Test that --verbose is accepted on the expand command itself."""
        result = runner.invoke(app, ["expand", declarations(), "--verbose"])

        assert result.exit_code == 0
        assert "14 cases against fakes:User" in result.output

    def test_run_failing(self, declarations):
        result = runner.invoke(app, ["expand", declarations("LaxUser"), "--run"])

        assert result.exit_code == 1
        assert "case(s) failed" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["expand", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Path not found" in result.output

    def test_unresolvable_target(self, declarations):
        result = runner.invoke(app, ["expand", declarations("Nobody")])

        assert result.exit_code == 1
        assert "Cannot resolve target" in result.output

    def test_bad_declaration(self, declarations):
        text = "target: fakes:{model}\ndeclarations:\n  - kind: presence\n    attributes: [name]\n    if: x\n"
        result = runner.invoke(app, ["expand", declarations(text=text)])

        assert result.exit_code == 1
        assert "Unsupported options" in result.output

    def test_non_numeric_bound(self, declarations):
        text = "target: fakes:{model}\ndeclarations:\n  - kind: value_range\n    attribute: age\n    minimum: '1'\n    maximum: 10\n"
        result = runner.invoke(app, ["expand", declarations(text=text)])

        assert result.exit_code == 1
        assert "must be numeric" in result.output


class TestResolveTarget:
    """Tests for resolve_target."""

    def test_nested_attribute(self):
        assert resolve_target("shouldkit.core.models:ExpectedOutcome.ACCEPTED").value == "accepted"

    def test_missing_module(self):
        with pytest.raises(TargetResolutionError, match="no_such_module"):
            resolve_target("no_such_module:Thing")
