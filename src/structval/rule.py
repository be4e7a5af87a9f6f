"""Rule data model: the compiled constraints for one field.

A ``Rule`` is built by ``RuleParser`` from rule text and is immutable once
built. Field values are wrapped in ``FieldValue`` so the engine works on a
declared kind (text or integer) instead of inspecting live objects.
"""

import re
from dataclasses import dataclass
from enum import Enum, IntFlag

from .exceptions import UsageError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class FailureCode(IntFlag):
    """Failure bits reported per field. Values match the historical constants."""
    NONE = 0
    LEN_MIN = 1 << 1
    LEN_MAX = 1 << 2
    VAL_MIN = 1 << 3
    VAL_MAX = 1 << 4
    EMPTY = 1 << 5
    PATTERN_MISMATCH = 1 << 6
    EMAIL_MISMATCH = 1 << 7
    ZERO = 1 << 8

    def names(self) -> list[str]:
        """Names of the individual failure bits set in this value."""
        return [code.name for code in FailureCode if code and code in self]


class ValueKind(str, Enum):
    """Declared kind of a field value."""
    TEXT = "text"
    INTEGER = "integer"


@dataclass(frozen=True)
class FieldValue:
    """A field value tagged with its kind."""
    kind: ValueKind
    value: str | int

    @classmethod
    def text(cls, value: str) -> "FieldValue":
        return cls(ValueKind.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> "FieldValue":
        if not INT64_MIN <= value <= INT64_MAX:
            raise UsageError(f"Integer value {value} is outside the signed 64-bit range")
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def of(cls, value: object) -> "FieldValue":
        """Tag a plain Python value. Only ``str`` and ``int`` are accepted."""
        # bool is an int subclass but never an integer field
        if isinstance(value, bool):
            raise UsageError("Boolean values cannot be validated")
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, int):
            return cls.integer(value)
        raise UsageError(f"Unsupported value type: {type(value).__name__}")

    @property
    def is_text(self) -> bool:
        return self.kind == ValueKind.TEXT

    @property
    def is_integer(self) -> bool:
        return self.kind == ValueKind.INTEGER


@dataclass(frozen=True)
class Rule:
    """Constraints for one field.

    Unset bounds are ``None``. Length, pattern and email constraints apply
    to text values only; numeric bounds apply to integer values only.

    Attributes:
        len_min: Minimum text length, active when greater than zero
        len_max: Maximum text length, active when greater than zero
        val_min: Minimum integer value, active when set (zero included)
        val_max: Maximum integer value, active when set (zero included)
        required: Text must be non-empty, integer must be non-zero unless
            a numeric bound is set
        is_email: Text must look like an email address
        pattern: Compiled pattern the text must match (search semantics)
    """
    len_min: int | None = None
    len_max: int | None = None
    val_min: int | None = None
    val_max: int | None = None
    required: bool = False
    is_email: bool = False
    pattern: re.Pattern | None = None

    @property
    def val_min_explicit_zero(self) -> bool:
        return self.val_min == 0

    @property
    def val_max_explicit_zero(self) -> bool:
        return self.val_max == 0

    @property
    def has_numeric_bounds(self) -> bool:
        return self.val_min is not None or self.val_max is not None

    @property
    def is_empty(self) -> bool:
        """True when no constraint is active."""
        return self == Rule()

    def describe(self) -> str:
        """Render the rule back into rule-text tokens.

        The output parses back to an equal rule unless the pattern contains
        whitespace, which the token language cannot express; such patterns
        must be passed as side-channel pattern text instead.
        """
        tokens = []
        if self.required:
            tokens.append("req")
        if self.is_email:
            tokens.append("email")
        for name in ("len_min", "len_max", "val_min", "val_max"):
            bound = getattr(self, name)
            if bound is not None:
                tokens.append(f"{name.replace('_', '')}:{bound}")
        if self.pattern is not None:
            tokens.append(f"regexp:{self.pattern.pattern}")
        return " ".join(tokens)
