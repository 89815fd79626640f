"""
Model descriptors and token usage types
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from pydantic import BaseModel, Field

from chatter.config.constants import DEFAULT_CONTEXT_LENGTH, MODEL_CONTEXT_LENGTHS


class Capability(Enum):
    """Declared model capabilities used to select how a call is made."""
    TEMPERATURE = "temperature"
    COMPLETION = "completion"
    AUDIO = "audio"
    STRUCTURED_OUTPUT = "structured_output"
    TOOLS = "tools"


TEXT_CAPABILITIES: FrozenSet[Capability] = frozenset({Capability.TEMPERATURE, Capability.COMPLETION})
STRUCTURED_CAPABILITIES: FrozenSet[Capability] = TEXT_CAPABILITIES | {Capability.STRUCTURED_OUTPUT}


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Which model a call targets and under which limits.

    Immutable: a node that needs a different model for one call builds a new
    descriptor with `with_overrides` instead of mutating the active one.
    """
    id: str
    provider: Optional[str] = None  # Falls back to settings.llm_provider
    capabilities: FrozenSet[Capability] = field(default=TEXT_CAPABILITIES)
    context_length: int = DEFAULT_CONTEXT_LENGTH
    temperature: Optional[float] = None

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def with_overrides(self, **changes) -> "ModelDescriptor":
        if "capabilities" in changes:
            changes["capabilities"] = frozenset(changes["capabilities"])
        return replace(self, **changes)


def describe_model(
    model_id: str,
    capabilities: Optional[Iterable[Capability]] = None,
    temperature: Optional[float] = None,
    provider: Optional[str] = None,
    context_length: Optional[int] = None,
) -> ModelDescriptor:
    """Build a descriptor, taking the context length from the model catalog."""
    return ModelDescriptor(
        id=model_id,
        provider=provider,
        capabilities=frozenset(capabilities) if capabilities is not None else TEXT_CAPABILITIES,
        context_length=context_length or MODEL_CONTEXT_LENGTHS.get(model_id, DEFAULT_CONTEXT_LENGTH),
        temperature=temperature,
    )


class TokenUsage(BaseModel):
    """Token counters reported by a model call"""
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass
class Completion:
    """Text returned by one model call plus its usage"""
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: Optional[str] = None
