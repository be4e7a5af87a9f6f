"""structval - Declarative field validation for structured records.

structval checks the str and int fields of a record against compact rule
text such as ``"req lenmin:5 lenmax:25"`` and reports machine-readable
failure codes per field.
"""

__version__ = "0.1.0"
__description__ = "Declarative field validation for structured records"

from structval.config import ValidationOptions
from structval.engine import ValidationEngine, ValidationRequest, ValidationResult
from structval.exceptions import PatternError, StructvalError, UsageError
from structval.parser import RuleParser, parse_rule
from structval.rule import FailureCode, FieldValue, Rule, ValueKind
from structval.validator import validate, validate_record

__all__ = [
    "__version__",
    "__description__",
    "FailureCode",
    "FieldValue",
    "PatternError",
    "Rule",
    "RuleParser",
    "StructvalError",
    "UsageError",
    "ValidationEngine",
    "ValidationOptions",
    "ValidationRequest",
    "ValidationResult",
    "ValueKind",
    "parse_rule",
    "validate",
    "validate_record",
]
