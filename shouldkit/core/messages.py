"""
Default validation error messages.

The table is explicit configuration: build an ``ErrorMessages`` (from a
preset, a dict or a YAML file) and hand it to the expander or a macro
group. Templates take a ``{count}`` placeholder; a template written as
``/.../`` becomes a regular-expression indicator instead of a literal.
"""

import re
from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from shouldkit.core.errors import ConfigurationError
from shouldkit.core.models import ErrorIndicator


def _is_pattern(template: str) -> bool:
    return len(template) > 1 and template.startswith("/") and template.endswith("/")


def _fill(template: str, params: dict[str, Any]) -> str:
    for name, value in params.items():
        template = template.replace("{" + name + "}", str(value))
    return template


class ErrorMessages(BaseModel):
    """Message templates keyed by the kind of validation failure."""

    model_config = {"frozen": True, "extra": "forbid"}

    blank: str = Field(default="can't be blank", description="Presence failures")
    taken: str = Field(default="has already been taken", description="Uniqueness failures")
    invalid: str = Field(default="is invalid", description="Format and generic failures")
    too_short: str = Field(
        default="is too short (minimum is {count} characters)",
        description="Length below the minimum",
    )
    too_long: str = Field(
        default="is too long (maximum is {count} characters)",
        description="Length above the maximum",
    )
    wrong_length: str = Field(
        default="is the wrong length (should be {count} characters)",
        description="Length other than the exact length",
    )
    inclusion: str = Field(default="is not included in the list", description="Value outside the allowed set or range")
    not_a_number: str = Field(default="is not a number", description="Non-numeric input")
    accepted: str = Field(default="must be accepted", description="Acceptance failures")

    # Preset tables, keyed by name
    PRESETS: ClassVar[dict[str, dict[str, str]]] = {
        "rails": {},
        "pydantic": {
            "blank": "Field required",
            "taken": "has already been taken",
            "invalid": "/String should match pattern|Value error/",
            "too_short": "/should have at least {count} characters?/",
            "too_long": "/should have at most {count} characters?/",
            "wrong_length": "/should have at (least|most) {count} characters?/",
            "inclusion": "/Input should be (greater|less) than( or equal to)?/",
            "not_a_number": "/Input should be a valid (integer|number)/",
            "accepted": "/Input should be True/",
        },
    }

    @field_validator("*")
    @classmethod
    def template_usable(cls, v: str) -> str:
        """Validate that no template is empty and pattern templates compile."""
        if not v:
            raise ValueError("Message template must not be empty")
        if _is_pattern(v):
            try:
                re.compile(_fill(v[1:-1], {"count": 0}))
            except re.error as e:
                raise ValueError(f"Invalid pattern template {v!r}: {e}") from e
        return v

    @classmethod
    def preset(cls, name: str) -> "ErrorMessages":
        """
        Load a preset message table by name.

        Args:
            name: Preset name (rails, pydantic)

        Returns:
            ErrorMessages for the preset
        """
        if name not in cls.PRESETS:
            available = ", ".join(cls.PRESETS.keys())
            msg = f"Unknown message preset: {name}. Available: {available}"
            raise ValueError(msg)
        return cls(**cls.PRESETS[name])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorMessages":
        """
        Build a table from a dictionary.

        A ``preset`` key selects the base table; the remaining keys override it.
        """
        data = dict(data)
        preset = data.pop("preset", None)
        if preset is not None and preset not in cls.PRESETS:
            available = ", ".join(cls.PRESETS.keys())
            raise ConfigurationError(f"Unknown message preset: {preset}. Available: {available}")
        base = cls.PRESETS[preset] if preset else {}
        try:
            return cls(**{**base, **data})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid message table: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ErrorMessages":
        """Load a message table from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Message file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    def indicator(self, key: str, **params: Any) -> ErrorIndicator:
        """
        Render the template for ``key`` into an error indicator.

        Only ``{name}`` placeholders named in ``params`` are substituted, so
        regex quantifiers and other braces are kept as written. Pattern
        templates have their parameters escaped before substitution and are
        compiled.
        """
        template: str = getattr(self, key)
        if _is_pattern(template):
            escaped = {k: re.escape(str(v)) for k, v in params.items()}
            return re.compile(_fill(template[1:-1], escaped))
        return _fill(template, params)

    def to_yaml(self) -> str:
        """Serialize to YAML format."""
        result: str = yaml.dump(
            self.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return result
