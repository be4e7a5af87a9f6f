"""Parser for the compact rule language.

Rule text is a whitespace-separated list of tokens::

    req email lenmin:5 lenmax:25 valmin:0 valmax:150 regexp:^[a-z]+$

Unknown tokens and unparseable numbers are dropped so that rule text stays
forward-compatible. A pattern that does not compile is the only parse error.
"""

import logging
import re
from typing import Any

from .exceptions import PatternError
from .rule import INT64_MAX, INT64_MIN, Rule

logger = logging.getLogger(__name__)

# Optional sign followed by ASCII digits, nothing else
_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")

_BOUND_TOKENS = {
    "lenmin": "len_min",
    "lenmax": "len_max",
    "valmin": "val_min",
    "valmax": "val_max",
}


def _parse_int(literal: str) -> int | None:
    if not _INTEGER_LITERAL.fullmatch(literal):
        return None
    number = int(literal)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a field pattern, raising ``PatternError`` on bad syntax.

    Patterns use the backtracking ``re`` engine, so a pathological pattern can
    take exponential time on some inputs. Rule text and pattern tags are
    treated as trusted configuration and must never come from the values
    being validated.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e


class RuleParser:
    """Builds ``Rule`` objects from rule text.

    The parser holds no state between calls; every call compiles its
    patterns from scratch.
    """

    def parse(self, rule_text: str, pattern_text: str = "", suffix_hint: str | None = None) -> Rule:
        """Parse rule text into a Rule.

        Args:
            rule_text: Whitespace-separated rule tokens (may be empty)
            pattern_text: Side-channel pattern; overrides any ``regexp:`` token when non-empty
            suffix_hint: Field name used for suffix inference, or None to disable it

        Returns:
            The immutable Rule

        Raises:
            PatternError: If a pattern does not compile
        """
        fields: dict[str, Any] = {}

        for token in rule_text.split():
            self._apply_token(fields, token)

        if pattern_text:
            fields["pattern"] = compile_pattern(pattern_text)

        if suffix_hint is not None:
            self._apply_suffix(fields, suffix_hint)

        return Rule(**fields)

    def _apply_token(self, fields: dict[str, Any], token: str) -> None:
        if token == "req":
            fields["required"] = True
            return
        if token == "email":
            fields["is_email"] = True
            return

        name, sep, argument = token.partition(":")
        if not sep:
            logger.debug(f"Ignoring unknown rule token: {token}")
            return

        if name == "regexp":
            fields["pattern"] = compile_pattern(argument)
        elif name in _BOUND_TOKENS:
            number = _parse_int(argument)
            if number is None:
                logger.debug(f"Ignoring rule token with invalid number: {token}")
                return
            fields[_BOUND_TOKENS[name]] = number
        else:
            logger.debug(f"Ignoring unknown rule token: {token}")

    def _apply_suffix(self, fields: dict[str, Any], name: str) -> None:
        if name.endswith("Email"):
            fields["is_email"] = True
        # Prices are non-negative unless the rule text already bounds them
        if name.endswith("Price") and fields.get("val_min") is None and fields.get("val_max") is None:
            fields["val_min"] = 0


def parse_rule(rule_text: str, pattern_text: str = "", suffix_hint: str | None = None) -> Rule:
    """Parse rule text with a fresh ``RuleParser``."""
    return RuleParser().parse(rule_text, pattern_text, suffix_hint)
