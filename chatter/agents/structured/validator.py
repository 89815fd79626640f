"""
Schema validator - checks whether model text deserializes into a schema

Pure functions, no side effects. Pydantic validation errors are normalized
into semantic types so the repair prompt and the metrics do not depend on
pydantic's raw wording.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from chatter.llm.response_utils import extract_json_from_markdown

T = TypeVar("T", bound=BaseModel)


class SchemaErrorType(Enum):
    """Semantic validation error types."""
    INVALID_JSON = "invalid_json"
    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"
    OTHER = "other"


_WRONG_TYPE_ERRORS = {"enum", "literal_error", "model_type", "model_attributes_type", "dict_type"}


@dataclass
class NormalizedSchemaError:
    """
    Normalized representation of a validation failure.

    Attributes:
        error_type: Semantic error type of the first failure
        raw_message: Original pydantic message
        details: Structured details, e.g. {"field": "checklist.0.point", "errors": [...]}
    """
    error_type: SchemaErrorType
    raw_message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def get_detail(self, key: str, default: Any = None) -> Any:
        return self.details.get(key, default)

    def describe(self) -> str:
        """Numbered list of every failure, as sent to the repair model."""
        errors: List[str] = self.details.get("errors") or [self.raw_message]
        return "\n".join(f"{i}. {err}" for i, err in enumerate(errors, 1))

    def __str__(self) -> str:
        return f"NormalizedSchemaError(type={self.error_type.value}, details={self.details})"


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[NormalizedSchemaError] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _location(loc) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def normalize_error(exc: PydanticValidationError) -> NormalizedSchemaError:
    """Map a pydantic ValidationError to a NormalizedSchemaError."""
    errors = exc.errors()
    messages = [f"{_location(err.get('loc', ()))}: {err.get('msg', '')}" for err in errors]
    if not errors:
        return NormalizedSchemaError(SchemaErrorType.OTHER, str(exc), {"errors": messages})

    first = errors[0]
    kind = first.get("type", "")
    details: Dict[str, Any] = {"errors": messages, "error_count": len(errors)}

    if kind == "json_invalid" or kind == "json_type":
        error_type = SchemaErrorType.INVALID_JSON
    elif kind == "missing":
        error_type = SchemaErrorType.MISSING_FIELD
        details["field"] = _location(first.get("loc", ()))
    elif kind.endswith("_type") or kind in _WRONG_TYPE_ERRORS:
        error_type = SchemaErrorType.WRONG_TYPE
        details["field"] = _location(first.get("loc", ()))
        details["expected"] = kind
    else:
        error_type = SchemaErrorType.OTHER

    return NormalizedSchemaError(error_type=error_type, raw_message=str(exc), details=details)


def validate_structured(text: str, schema: Type[T]) -> ValidationResult[T]:
    """
    Validate model output text against a pydantic schema.

    Markdown code fences around the JSON are tolerated.
    """
    payload = extract_json_from_markdown(text or "")
    try:
        return ValidationResult(value=schema.model_validate_json(payload))
    except PydanticValidationError as e:
        return ValidationResult(error=normalize_error(e))
