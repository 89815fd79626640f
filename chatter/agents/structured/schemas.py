"""
Structured response schemas
"""

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class IntentClassification(str, Enum):
    """How to respond to the user"""
    DIRECT_ANSWER = "DIRECT_ANSWER"  # Simple question or enough information to answer
    COLLECT_INFO = "COLLECT_INFO"  # Something complex to build, or details are missing


class IntentAnalysis(BaseModel):
    """Analysis of a user request and the response type it needs"""
    intent_type: IntentClassification = Field(
        ...,
        validation_alias=AliasChoices("intent_type", "intentType"),
        description="How to respond to the user: DIRECT_ANSWER or COLLECT_INFO",
    )

    @field_validator("intent_type", mode="before")
    @classmethod
    def _normalize_label(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class ChecklistItem(BaseModel):
    """Checklist item collecting requirements for the user's task"""
    model_config = ConfigDict(frozen=True)

    point: str = Field(
        ...,
        description="Checklist point. Points are created to ask the user for as many details as needed",
    )
    resolution: Optional[str] = Field(
        default=None,
        description="Resolution from the user's answer. Null while it still has to be asked. "
        "Must not change once the user gave the information",
    )

    @property
    def is_resolved(self) -> bool:
        return bool(self.resolution and self.resolution.strip())


class StructuredResponse(BaseModel):
    """Structured answer: title, message and an ordered checklist"""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Short title of what this dialog is about")
    message: str = Field(..., description="Full response message")
    checklist: List[ChecklistItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("checklist", "checkList"),
        description="Questions checklist used to gather details from the user. Keep it to 10 points or fewer",
    )


class CompletionStatus(BaseModel):
    """Whether the checklist of a structured answer is fully resolved"""
    is_complete: bool
    requires_more_info: bool
    ready_for_final_answer: bool

    @classmethod
    def from_response(cls, response: StructuredResponse) -> "CompletionStatus":
        has_checklist = bool(response.checklist)
        all_resolved = all(item.is_resolved for item in response.checklist)
        return cls(
            is_complete=not has_checklist or all_resolved,
            requires_more_info=has_checklist and not all_resolved,
            ready_for_final_answer=has_checklist and all_resolved,
        )
