"""Configuration for structval using Pydantic models."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_TAG_NAME = "validation"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class ValidationOptions(BaseModel):
    """Options controlling which fields are validated and with what rules.

    Field-level overrides take precedence over the rules and values the
    record itself declares. ``restrict_fields`` accepts a list of names or a
    name-to-bool mapping, where only names mapped to true are selected.
    """
    restrict_fields: set[str] = Field(alias="restrictFields", default_factory=set)
    overwrite_field_tags: dict[str, dict[str, str]] = Field(alias="overwriteFieldTags", default_factory=dict)
    overwrite_tag_name: str = Field(alias="overwriteTagName", default="")
    validate_when_suffix: bool = Field(alias="validateWhenSuffix", default=False)
    overwrite_field_values: dict[str, Any] = Field(alias="overwriteFieldValues", default_factory=dict)

    @field_validator("restrict_fields", mode="before")
    @classmethod
    def validate_restrict_fields(cls, v):
        if isinstance(v, dict):
            for name, selected in v.items():
                if not isinstance(selected, bool):
                    raise ValueError(f"restrict_fields values must be booleans, got {selected!r} for {name!r}")
            return {name for name, selected in v.items() if selected}
        return v

    @field_validator("overwrite_tag_name")
    @classmethod
    def validate_tag_name(cls, v):
        if v and any(ch.isspace() for ch in v):
            raise ValueError(f"overwrite_tag_name must not contain whitespace, got: {v!r}")
        return v

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @property
    def tag_name(self) -> str:
        """Tag holding rule text; the pattern tag is this name plus ``_regexp``."""
        return self.overwrite_tag_name or DEFAULT_TAG_NAME

    @property
    def pattern_tag_name(self) -> str:
        return f"{self.tag_name}_regexp"

    def in_scope(self, name: str) -> bool:
        """Whether a field is selected by ``restrict_fields`` (empty selects all)."""
        return not self.restrict_fields or name in self.restrict_fields


class FieldType(str, Enum):
    """Declared field types in a record schema."""
    STR = "str"
    INT = "int"
    OTHER = "other"


class FieldSchema(BaseModel):
    """One field of a record schema."""
    name: str
    type: FieldType = FieldType.STR
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v:
            raise ValueError("field name must not be empty")
        return v

    model_config = ConfigDict(extra="forbid")


class RecordSchema(BaseModel):
    """Declared fields of a record and the rule tags attached to them."""
    name: str | None = None
    fields: list[FieldSchema] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def validate_unique_names(cls, v):
        names = [f.name for f in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate field names: {', '.join(duplicates)}")
        return v

    model_config = ConfigDict(extra="forbid")


def _load_json(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}")


def load_options(path: str | Path | None = None) -> ValidationOptions:
    """Load validation options from a JSON file.

    Args:
        path: Options file. If None, default (empty) options are returned.

    Returns:
        ValidationOptions: Loaded and validated options

    Raises:
        FileNotFoundError: If the file is specified but not found
        ValueError: If the file is not valid JSON or the options are invalid
    """
    if path is None:
        return ValidationOptions()

    data = _load_json(path)
    try:
        return ValidationOptions(**data)
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Failed to load options from {path}: {e}")


def load_record(path: str | Path) -> dict[str, Any]:
    """Load a record (a JSON object of field values) from a file."""
    data = _load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Record in {path} must be a JSON object")
    return data


def load_schema(path: str | Path) -> RecordSchema:
    """Load a record schema from a JSON file.

    Raises:
        FileNotFoundError: If the file is not found
        ValueError: If the file is not valid JSON or the schema is invalid
    """
    data = _load_json(path)
    try:
        return RecordSchema(**data)
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Failed to load schema from {path}: {e}")
