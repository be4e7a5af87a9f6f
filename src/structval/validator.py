"""Record validation: ties field discovery, rule parsing and evaluation together.

For each declared field this module selects the field (type and
``restrict_fields``), resolves rule text and value (options override the
record), parses a fresh ``Rule`` and hands everything to the engine.
"""

import logging
from typing import Any, Iterator, Mapping

from .config import RecordSchema, ValidationOptions
from .engine import ValidationEngine, ValidationRequest, ValidationResult
from .exceptions import UsageError
from .fields import FieldSpec, fields_of, values_of
from .parser import RuleParser
from .rule import FieldValue, ValueKind

logger = logging.getLogger(__name__)


def _field_tags(spec: FieldSpec, options: ValidationOptions) -> tuple[str, str]:
    """Rule text and side-channel pattern for a field, after overrides."""
    rule_text = spec.tag(options.tag_name)
    pattern_text = spec.tag(options.pattern_tag_name)

    overrides = options.overwrite_field_tags.get(spec.name)
    if overrides:
        rule_text = overrides.get(options.tag_name, rule_text)
        pattern_text = overrides.get(options.pattern_tag_name, pattern_text)

    return rule_text, pattern_text


def _field_value(spec: FieldSpec, values: Mapping[str, Any], options: ValidationOptions) -> FieldValue:
    if spec.name in options.overwrite_field_values:
        return FieldValue.of(options.overwrite_field_values[spec.name])

    stored = values.get(spec.name, spec.zero_value)
    if spec.kind == ValueKind.TEXT and isinstance(stored, str):
        return FieldValue.text(stored)
    if spec.kind == ValueKind.INTEGER and isinstance(stored, int) and not isinstance(stored, bool):
        return FieldValue.integer(stored)
    raise UsageError(f"Field {spec.name} is declared {spec.kind.value} "
                     f"but holds {type(stored).__name__}")


def build_requests(
    fields: list[FieldSpec],
    values: Mapping[str, Any],
    options: ValidationOptions,
) -> Iterator[ValidationRequest]:
    """Yield one validation request per selected field."""
    parser = RuleParser()

    for spec in fields:
        if not options.in_scope(spec.name):
            continue
        if spec.kind is None:
            logger.debug(f"Skipping field {spec.name}: not a str or int field")
            continue

        rule_text, pattern_text = _field_tags(spec, options)
        suffix_hint = spec.name if options.validate_when_suffix else None
        rule = parser.parse(rule_text, pattern_text, suffix_hint)

        yield ValidationRequest(spec.name, _field_value(spec, values, options), rule)


def validate_record(
    values: Mapping[str, Any],
    fields: list[FieldSpec],
    options: ValidationOptions | None,
) -> ValidationResult:
    """Validate a mapping of field values against declared fields.

    Args:
        values: Stored field values by name; missing fields use their zero value
        fields: Declared fields with their rule tags
        options: Validation options (required, may be empty)

    Returns:
        ValidationResult with per-field failure codes

    Raises:
        UsageError: If options are missing, a value has the wrong type or a
            pattern does not compile
    """
    if options is None:
        raise UsageError("ValidationOptions cannot be None")

    return ValidationEngine().validate(build_requests(fields, values, options))


def validate(obj: Any, options: ValidationOptions | None) -> ValidationResult:
    """Validate the str and int fields of a dataclass or pydantic model instance.

    Example:
        >>> @dataclass
        ... class User:
        ...     name: str = field(default="", metadata={"validation": "req lenmin:2"})
        ...     age: int = field(default=0, metadata={"validation": "valmin:18 valmax:150"})
        >>> validate(User(name="Al", age=10), ValidationOptions()).failures
        {'age': <FailureCode.VAL_MIN: 8>}

    Raises:
        UsageError: If options are missing, ``obj`` is a ``RecordSchema`` or
            a field value or pattern is invalid
    """
    if options is None:
        raise UsageError("ValidationOptions cannot be None")
    if isinstance(obj, RecordSchema):
        raise UsageError("A RecordSchema declares fields but holds no values; "
                         "use validate_record(values, schema_fields(schema), options)")

    fields = fields_of(obj)
    return validate_record(values_of(obj, fields), fields, options)
