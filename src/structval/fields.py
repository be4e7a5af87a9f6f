"""Field discovery for validated records.

Rules are attached to fields as string tags: dataclass field metadata,
pydantic ``json_schema_extra`` or the ``tags`` of a ``RecordSchema`` field.
This module turns each of those into a list of ``FieldSpec``.
"""

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel

from .config import FieldType, RecordSchema
from .exceptions import UsageError
from .rule import ValueKind

_ZERO_VALUES = {ValueKind.TEXT: "", ValueKind.INTEGER: 0}


@dataclass(frozen=True)
class FieldSpec:
    """A declared field: name, value kind (None when not validatable) and tags."""
    name: str
    kind: ValueKind | None
    tags: Mapping[str, str] = field(default_factory=dict)

    def tag(self, name: str) -> str:
        return self.tags.get(name, "")

    @property
    def zero_value(self) -> str | int | None:
        """Value used when a record does not carry this field."""
        return _ZERO_VALUES.get(self.kind)


def kind_of(annotation: Any) -> ValueKind | None:
    """Map a type annotation to a value kind. Only plain ``str`` and ``int`` qualify."""
    if annotation is str:
        return ValueKind.TEXT
    if annotation is int:
        return ValueKind.INTEGER
    return None


def _string_tags(tags: Any) -> dict[str, str]:
    if not isinstance(tags, Mapping):
        return {}
    return {k: v for k, v in tags.items() if isinstance(k, str) and isinstance(v, str)}


def dataclass_fields(obj: Any) -> list[FieldSpec]:
    cls = obj if isinstance(obj, type) else type(obj)
    hints = typing.get_type_hints(cls)
    return [
        FieldSpec(f.name, kind_of(hints.get(f.name, f.type)), _string_tags(f.metadata))
        for f in dataclasses.fields(cls)
    ]


def model_fields(obj: Any) -> list[FieldSpec]:
    cls = obj if isinstance(obj, type) else type(obj)
    return [
        FieldSpec(name, kind_of(info.annotation), _string_tags(info.json_schema_extra))
        for name, info in cls.model_fields.items()
    ]


_SCHEMA_KINDS = {FieldType.STR: ValueKind.TEXT, FieldType.INT: ValueKind.INTEGER}


def schema_fields(schema: RecordSchema) -> list[FieldSpec]:
    return [FieldSpec(f.name, _SCHEMA_KINDS.get(f.type), dict(f.tags)) for f in schema.fields]


def fields_of(obj: Any) -> list[FieldSpec]:
    """Discover the declared fields of a dataclass, pydantic model or schema.

    Raises:
        UsageError: If the object is none of the supported kinds
    """
    if isinstance(obj, RecordSchema):
        return schema_fields(obj)
    if dataclasses.is_dataclass(obj):
        return dataclass_fields(obj)
    if isinstance(obj, BaseModel) or (isinstance(obj, type) and issubclass(obj, BaseModel)):
        return model_fields(obj)
    raise UsageError(f"Cannot discover fields of {type(obj).__name__}; "
                     "expected a dataclass, pydantic model or RecordSchema")


def values_of(obj: Any, fields: list[FieldSpec]) -> dict[str, Any]:
    """Read the stored value of each field from a record object or mapping."""
    if isinstance(obj, Mapping):
        return {f.name: obj[f.name] for f in fields if f.name in obj}
    return {f.name: getattr(obj, f.name) for f in fields if hasattr(obj, f.name)}
