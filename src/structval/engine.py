"""Validation engine: evaluates rules against field values.

Evaluation is pure. The engine keeps no state between calls and reports
failures as ``FailureCode`` bits rather than raising.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from .exceptions import UsageError
from .rule import FailureCode, FieldValue, Rule

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)


@dataclass(frozen=True)
class ValidationRequest:
    """One field to validate: its name, tagged value and rule."""
    name: str
    value: FieldValue
    rule: Rule


@dataclass
class ValidationResult:
    """Outcome of validating a set of fields."""
    valid: bool = True
    failures: dict[str, FailureCode] = field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = valid, 1 = invalid."""
        return 0 if self.valid else 1

    @property
    def failed_fields(self) -> list[str]:
        return list(self.failures)

    def add_failure(self, name: str, codes: FailureCode) -> None:
        """Record failure codes for a field and mark the result invalid."""
        self.failures[name] = self.failures.get(name, FailureCode.NONE) | codes
        self.valid = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "exit_code": self.exit_code,
            "failures": {
                name: {"code": int(codes), "reasons": codes.names()}
                for name, codes in self.failures.items()
            },
        }


class ValidationEngine:
    """Evaluates rules against tagged field values."""

    def evaluate(self, value: FieldValue, rule: Rule) -> tuple[bool, FailureCode]:
        """Evaluate one value against one rule.

        Required-ness is checked first and short-circuits. Text checks
        report only the first failing check; integer checks can report
        both bounds.

        Returns:
            Tuple of (ok, failure codes)
        """
        if rule.required:
            if value.is_text and value.value == "":
                return False, FailureCode.EMPTY
            # A set numeric bound makes zero a legitimate value
            if value.is_integer and value.value == 0 and not rule.has_numeric_bounds:
                return False, FailureCode.ZERO

        if value.is_text:
            codes = self._check_text(value.value, rule)
        else:
            codes = self._check_integer(value.value, rule)

        return not codes, codes

    def _check_text(self, text: str, rule: Rule) -> FailureCode:
        if rule.len_min is not None and rule.len_min > 0 and len(text) < rule.len_min:
            return FailureCode.LEN_MIN
        if rule.len_max is not None and rule.len_max > 0 and len(text) > rule.len_max:
            return FailureCode.LEN_MAX
        if rule.pattern is not None and not rule.pattern.search(text):
            return FailureCode.PATTERN_MISMATCH
        if rule.is_email and not EMAIL_PATTERN.fullmatch(text):
            return FailureCode.EMAIL_MISMATCH
        return FailureCode.NONE

    def _check_integer(self, number: int, rule: Rule) -> FailureCode:
        codes = FailureCode.NONE
        if rule.val_min is not None and number < rule.val_min:
            codes |= FailureCode.VAL_MIN
        if rule.val_max is not None and number > rule.val_max:
            codes |= FailureCode.VAL_MAX
        return codes

    def validate(self, requests: Iterable[ValidationRequest]) -> ValidationResult:
        """Evaluate every request and aggregate failures per field.

        Raises:
            UsageError: If a field name appears more than once
        """
        result = ValidationResult()
        seen: set[str] = set()

        for request in requests:
            if request.name in seen:
                raise UsageError(f"Duplicate field name: {request.name}")
            seen.add(request.name)

            ok, codes = self.evaluate(request.value, request.rule)
            if not ok:
                logger.debug(f"Field {request.name} failed: {', '.join(codes.names())}")
                result.add_failure(request.name, codes)

        logger.info(f"Validated {len(seen)} fields, {len(result.failures)} failed")
        return result
