"""Unit tests for record validation and field discovery."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, Field

from structval.config import RecordSchema, ValidationOptions
from structval.exceptions import PatternError, UsageError
from structval.fields import FieldSpec, fields_of, kind_of, values_of
from structval.rule import FailureCode, ValueKind
from structval.validator import validate, validate_record


@dataclass
class User:
    name: str = field(default="", metadata={"validation": "req lenmin:2 lenmax:25"})
    age: int = field(default=0, metadata={"validation": "valmin:18 valmax:150"})
    code: str = field(default="", metadata={"validation": "req", "validation_regexp": "^[A-Z]{3}$"})
    ContactEmail: str = ""
    ListPrice: int = 0
    active: bool = field(default=True, metadata={"validation": "req"})
    tags: list = field(default_factory=list, metadata={"validation": "req"})


class Product(BaseModel):
    title: str = Field(default="", json_schema_extra={"validation": "req lenmax:10"})
    stock: int = Field(default=0, json_schema_extra={"validation": "req valmin:0"})
    weight: float = Field(default=0.0, json_schema_extra={"validation": "req"})


@pytest.fixture
def options():
    return ValidationOptions()


@pytest.fixture
def valid_user():
    return User(name="Alice", age=30, code="ABC", ContactEmail="alice", ListPrice=-1)


class TestFieldDiscovery:
    """Test field discovery for supported record kinds."""

    def test_kind_of(self):
        assert kind_of(str) == ValueKind.TEXT
        assert kind_of(int) == ValueKind.INTEGER
        assert kind_of(bool) is None
        assert kind_of(float) is None
        assert kind_of(str | None) is None

    def test_dataclass_fields(self, valid_user):
        specs = {spec.name: spec for spec in fields_of(valid_user)}
        assert specs["name"].kind == ValueKind.TEXT
        assert specs["age"].kind == ValueKind.INTEGER
        assert specs["active"].kind is None
        assert specs["tags"].kind is None
        assert specs["code"].tag("validation_regexp") == "^[A-Z]{3}$"
        assert specs["ContactEmail"].tag("validation") == ""

    def test_dataclass_class_fields(self):
        assert [spec.name for spec in fields_of(User)][:2] == ["name", "age"]

    def test_pydantic_fields(self):
        specs = {spec.name: spec for spec in fields_of(Product())}
        assert specs["title"].kind == ValueKind.TEXT
        assert specs["title"].tag("validation") == "req lenmax:10"
        assert specs["weight"].kind is None

    def test_schema_fields(self):
        schema = RecordSchema(fields=[
            {"name": "Name", "type": "str", "tags": {"validation": "req"}},
            {"name": "Count", "type": "int"},
            {"name": "Blob", "type": "other"},
        ])
        kinds = [spec.kind for spec in fields_of(schema)]
        assert kinds == [ValueKind.TEXT, ValueKind.INTEGER, None]

    def test_unsupported_object(self):
        with pytest.raises(UsageError):
            fields_of({"name": "x"})

    def test_values_of_mapping(self):
        specs = [FieldSpec("a", ValueKind.TEXT), FieldSpec("b", ValueKind.INTEGER)]
        assert values_of({"a": "x"}, specs) == {"a": "x"}


class TestValidate:
    """Test validating dataclass and pydantic records."""

    def test_valid_record(self, valid_user, options):
        result = validate(valid_user, options)
        assert result.valid is True
        assert result.failures == {}

    def test_invalid_record(self, options):
        user = User(name="A", age=200, code="abc")
        result = validate(user, options)
        assert result.valid is False
        assert result.failures == {
            "name": FailureCode.LEN_MIN,
            "age": FailureCode.VAL_MAX,
            "code": FailureCode.PATTERN_MISMATCH,
        }

    def test_non_str_int_fields_skipped(self, valid_user, options):
        valid_user.active = False
        result = validate(valid_user, options)
        assert "active" not in result.failures
        assert "tags" not in result.failures

    def test_options_required(self, valid_user):
        with pytest.raises(UsageError, match="cannot be None"):
            validate(valid_user, None)

    def test_pydantic_model(self, options):
        result = validate(Product(title="a very long title", stock=0), options)
        assert result.failures == {"title": FailureCode.LEN_MAX}

    def test_record_schema_rejected(self, options):
        schema = RecordSchema(name="User", fields=[
            {"name": "name", "type": "str", "tags": {"validation": "lenmin:10"}},
            {"name": "fields", "type": "int"},
        ])
        with pytest.raises(UsageError, match="validate_record"):
            validate(schema, options)

    def test_record_schema_via_validate_record(self, options):
        schema = RecordSchema(name="User", fields=[
            {"name": "name", "type": "str", "tags": {"validation": "lenmin:10"}},
            {"name": "fields", "type": "int", "tags": {"validation": "valmax:3"}},
        ])
        result = validate_record({"name": "Alexandra Smith", "fields": 2}, fields_of(schema), options)
        assert result.valid is True

    def test_malformed_pattern_aborts(self, options):
        @dataclass
        class Broken:
            name: str = field(default="x", metadata={"validation": "regexp:[oops"})

        with pytest.raises(PatternError):
            validate(Broken(), options)


class TestOptions:
    """Test option handling during validation."""

    def test_restrict_fields(self):
        user = User(name="", age=1, code="")
        result = validate(user, ValidationOptions(restrict_fields={"age"}))
        assert result.failures == {"age": FailureCode.VAL_MIN}

    def test_overwrite_field_tags(self, valid_user):
        options = ValidationOptions(overwrite_field_tags={"name": {"validation": "lenmax:3"}})
        result = validate(valid_user, options)
        assert result.failures == {"name": FailureCode.LEN_MAX}

    def test_overwrite_pattern_tag(self, valid_user):
        options = ValidationOptions(overwrite_field_tags={"code": {"validation_regexp": "^[0-9]+$"}})
        result = validate(valid_user, options)
        assert result.failures == {"code": FailureCode.PATTERN_MISMATCH}

    def test_overwrite_tag_name(self):
        @dataclass
        class Account:
            login: str = field(default="", metadata={"validation": "req", "check": "lenmin:5"})

        result = validate(Account(login="bob"), ValidationOptions(overwrite_tag_name="check"))
        assert result.failures == {"login": FailureCode.LEN_MIN}
        assert validate(Account(login="bob"), ValidationOptions()).valid is True

    def test_overwrite_field_values(self, valid_user):
        options = ValidationOptions(overwrite_field_values={"age": 10, "name": ""})
        result = validate(valid_user, options)
        assert result.failures == {"age": FailureCode.VAL_MIN, "name": FailureCode.EMPTY}
        assert valid_user.age == 30

    def test_overwrite_value_unsupported_type(self, valid_user):
        options = ValidationOptions(overwrite_field_values={"age": 1.5})
        with pytest.raises(UsageError):
            validate(valid_user, options)

    def test_suffix_inference(self, valid_user):
        result = validate(valid_user, ValidationOptions(validate_when_suffix=True))
        assert result.failures == {
            "ContactEmail": FailureCode.EMAIL_MISMATCH,
            "ListPrice": FailureCode.VAL_MIN,
        }

    def test_suffix_inference_passes(self, valid_user):
        valid_user.ContactEmail = "alice@example.com"
        valid_user.ListPrice = 0
        assert validate(valid_user, ValidationOptions(validate_when_suffix=True)).valid is True

    def test_suffix_inference_disabled(self, valid_user, options):
        assert validate(valid_user, options).valid is True


class TestValidateRecord:
    """Test validating mappings against declared fields."""

    @pytest.fixture
    def fields(self):
        return [
            FieldSpec("Name", ValueKind.TEXT, {"validation": "req"}),
            FieldSpec("Age", ValueKind.INTEGER, {"validation": "req"}),
            FieldSpec("Notes", None, {"validation": "req"}),
        ]

    def test_missing_values_use_zero_value(self, fields):
        result = validate_record({}, fields, ValidationOptions())
        assert result.failures == {"Name": FailureCode.EMPTY, "Age": FailureCode.ZERO}

    def test_type_mismatch(self, fields):
        with pytest.raises(UsageError, match="declared integer"):
            validate_record({"Name": "x", "Age": "12"}, fields, ValidationOptions())

    def test_bool_is_not_integer(self, fields):
        with pytest.raises(UsageError):
            validate_record({"Name": "x", "Age": True}, fields, ValidationOptions())

    def test_options_required(self, fields):
        with pytest.raises(UsageError):
            validate_record({}, fields, None)

    def test_repeated_calls_identical(self, fields):
        values = {"Name": "", "Age": 3}
        first = validate_record(values, fields, ValidationOptions())
        second = validate_record(values, fields, ValidationOptions())
        assert first == second
