"""
Exceptions raised while building test cases.

Everything here is fatal at suite-construction time. Assertion failures
during case execution are plain ``AssertionError`` and never pass through
these types.
"""


class ShouldkitError(Exception):
    """Base class for shouldkit errors."""


class ConfigurationError(ShouldkitError, ValueError):
    """Raised when a declaration cannot be expanded as written."""


class InvalidRangeError(ConfigurationError):
    """Raised when a range declaration has its bounds reversed."""

    def __init__(self, minimum: object, maximum: object) -> None:
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Invalid range: minimum {minimum!r} is greater than maximum {maximum!r}")


class UnsupportedOptionError(ConfigurationError):
    """Raised when a declaration is given options it does not understand."""

    def __init__(self, options: list[str]) -> None:
        self.options = options
        super().__init__(f"Unsupported options given: {', '.join(options)}")


class TargetResolutionError(ConfigurationError):
    """Raised when a declaration file names a target that cannot be imported."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        super().__init__(f"Cannot resolve target '{target}': {reason}")
