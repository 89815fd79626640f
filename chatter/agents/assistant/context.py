"""
Assistant context - dependencies passed to graph nodes
"""

from dataclasses import dataclass
from typing import Optional

from chatter.agents.structured.fixing import FixingCoordinator
from chatter.config.settings import settings
from chatter.llm.client import ModelClient
from chatter.llm.models import (
    STRUCTURED_CAPABILITIES,
    TEXT_CAPABILITIES,
    Capability,
    ModelDescriptor,
    describe_model,
)
from chatter.storage.audio import AudioStorage


def default_answer_model() -> ModelDescriptor:
    return describe_model(settings.answer_model, TEXT_CAPABILITIES, temperature=settings.answer_temperature)


def default_classifier_model() -> ModelDescriptor:
    return describe_model(
        settings.classifier_model,
        STRUCTURED_CAPABILITIES,
        temperature=settings.classifier_temperature,
    )


def default_collect_info_model() -> ModelDescriptor:
    return describe_model(settings.collect_info_model, STRUCTURED_CAPABILITIES)


def default_transcription_model() -> ModelDescriptor:
    return describe_model(
        settings.transcription_model,
        TEXT_CAPABILITIES | {Capability.AUDIO},
        temperature=settings.transcription_temperature,
    )


@dataclass
class AssistantContext:
    """
    Context holding dependencies for assistant nodes.

    Shared by concurrent runs, so it holds no per-run state; everything that
    changes during a run lives on the Session.
    """

    client: ModelClient
    fixing: FixingCoordinator
    audio_storage: AudioStorage
    answer_model: ModelDescriptor
    classifier_model: ModelDescriptor
    collect_info_model: ModelDescriptor
    transcription_model: ModelDescriptor
    system_prompt: Optional[str] = None
    history_token_threshold: Optional[int] = None  # None = derive from the active model
    classification_history_turns: int = 4
    keep_recent_messages: int = 4
    max_compression_passes: int = 3
    summary_budget_ratio: float = 0.25
