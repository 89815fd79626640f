"""
Structured output - schemas, validation and the fixing coordinator
"""

from chatter.agents.structured.fixing import FixingCoordinator, FixingOutcome, default_fixing_model
from chatter.agents.structured.schemas import (
    ChecklistItem,
    CompletionStatus,
    IntentAnalysis,
    IntentClassification,
    StructuredResponse,
)
from chatter.agents.structured.validator import (
    NormalizedSchemaError,
    SchemaErrorType,
    ValidationResult,
    normalize_error,
    validate_structured,
)

__all__ = [
    "FixingCoordinator",
    "FixingOutcome",
    "default_fixing_model",
    "ChecklistItem",
    "CompletionStatus",
    "IntentAnalysis",
    "IntentClassification",
    "StructuredResponse",
    "NormalizedSchemaError",
    "SchemaErrorType",
    "ValidationResult",
    "normalize_error",
    "validate_structured",
]
