"""
Assistant request and result types
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from chatter.agents.structured.schemas import (
    ChecklistItem,
    CompletionStatus,
    IntentClassification,
    StructuredResponse,
)
from chatter.llm.models import TokenUsage


class ChatTurn(BaseModel):
    """One previous turn of the conversation"""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"]
    content: str


class ConversationRequest(BaseModel):
    """
    One incoming user turn.

    Immutable: nodes that change it (transcription) return a copy.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str = ""
    history: Tuple[ChatTurn, ...] = ()
    audio_reference: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("audio_reference", "audioReference")
    )
    conversation_state: Optional[Tuple[ChecklistItem, ...]] = Field(
        default=None, validation_alias=AliasChoices("conversation_state", "conversationState")
    )
    conversation_id: Optional[str] = None
    system_prompt: Optional[str] = None
    max_history_length: Optional[int] = Field(default=None, ge=0)

    def recent_history(self, limit: int) -> Tuple[ChatTurn, ...]:
        if limit <= 0:
            return ()
        return self.history[-limit:]

    @property
    def checklist(self) -> List[ChecklistItem]:
        return list(self.conversation_state or ())


@dataclass(frozen=True)
class ClassifiedRequest:
    intent: IntentClassification
    request: ConversationRequest


@dataclass(frozen=True)
class DirectAnswer:
    text: str
    request: ConversationRequest


@dataclass(frozen=True)
class StructuredAnswer:
    response: StructuredResponse
    request: ConversationRequest
    repair_calls: int = 0


@dataclass(frozen=True)
class CheckedAnswer:
    status: CompletionStatus
    answer: StructuredAnswer


class AgentResult(BaseModel):
    """What a run returns to the caller: free text or a structured response"""
    text: Optional[str] = None
    structured: Optional[StructuredResponse] = None
    intent: IntentClassification
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model_calls: int = 0
    events: List[Dict[str, Any]] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    conversation_state: Optional[List[ChecklistItem]] = None

    @property
    def is_structured(self) -> bool:
        return self.structured is not None
