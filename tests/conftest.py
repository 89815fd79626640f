"""
Shared fixtures: a scripted fake Model Client and assistant contexts.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.structured.fixing import FixingCoordinator
from chatter.agents.structured.metrics import reset_metrics
from chatter.graph.session import Session
from chatter.llm.models import (
    STRUCTURED_CAPABILITIES,
    TEXT_CAPABILITIES,
    Capability,
    Completion,
    TokenUsage,
    describe_model,
)
from chatter.storage.audio import AudioStorage

ANSWER_MODEL = describe_model("test/answer", TEXT_CAPABILITIES, temperature=0.7, context_length=100_000)
CLASSIFIER_MODEL = describe_model("test/classifier", STRUCTURED_CAPABILITIES, temperature=0.0)
COLLECT_INFO_MODEL = describe_model("test/collect", STRUCTURED_CAPABILITIES)
TRANSCRIPTION_MODEL = describe_model(
    "test/audio", TEXT_CAPABILITIES | {Capability.AUDIO}, temperature=0.0
)
FIXING_MODEL = describe_model("test/fixer", STRUCTURED_CAPABILITIES, temperature=0.0, context_length=20_000)

DEFAULT_USAGE = TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15)


class FakeModelClient:
    """
    Stand-in for ModelClient.

    Each call pops the next scripted response: a string is returned as the
    completion text, an exception instance is raised, and an async callable
    is awaited with the session (and its result returned as text).
    Every prompt the client receives is recorded.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> "FakeModelClient":
        self.responses.extend(responses)
        return self

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def calls_to(self, model_id: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["model"].id == model_id]

    async def complete(self, session: Session, structured: bool = False) -> Completion:
        self.calls.append(
            {
                "messages": session.messages,
                "model": session.model,
                "structured": structured,
                "isolated": session.in_isolated_call,
            }
        )
        if not self.responses:
            raise AssertionError("FakeModelClient ran out of scripted responses")

        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = await response(session)

        session.usage.add(DEFAULT_USAGE)
        return Completion(text=response, usage=DEFAULT_USAGE, model=session.model.id)


def run(coro):
    return asyncio.run(coro)


def make_context(client, **overrides) -> AssistantContext:
    values = dict(
        client=client,
        fixing=FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3),
        audio_storage=AudioStorage(),
        answer_model=ANSWER_MODEL,
        classifier_model=CLASSIFIER_MODEL,
        collect_info_model=COLLECT_INFO_MODEL,
        transcription_model=TRANSCRIPTION_MODEL,
    )
    values.update(overrides)
    return AssistantContext(**values)


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def fake_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def ctx(fake_client) -> AssistantContext:
    return make_context(fake_client)


@pytest.fixture
def session() -> Session:
    return Session.create(ANSWER_MODEL, system_prompt="You are a helpful assistant.")
