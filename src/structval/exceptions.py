"""Exceptions raised by structval.

Validation failures are never raised: they are reported as data in
``ValidationResult``. The exceptions here signal misuse of the library.
"""


class StructvalError(Exception):
    """Base class for structval errors."""


class UsageError(StructvalError):
    """Raised for fatal, non-recoverable misuse (missing options, bad values)."""


class PatternError(UsageError):
    """Raised when a pattern in rule text or a side-channel tag does not compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
