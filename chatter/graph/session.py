"""
Session - per-run prompt-building state

A Session holds exactly one active prompt (messages + model descriptor).
Nodes read and rewrite it; a node that needs an isolated sub-call swaps in
its own prompt through a save point and restores the original afterwards.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from chatter.llm.models import ModelDescriptor, TokenUsage


@dataclass(frozen=True)
class Prompt:
    """Messages plus the model they are sent to"""
    messages: Tuple[BaseMessage, ...]
    model: ModelDescriptor

    def with_messages(self, messages: Sequence[BaseMessage]) -> "Prompt":
        return replace(self, messages=tuple(messages))

    def with_model(self, model: ModelDescriptor) -> "Prompt":
        return replace(self, model=model)


@dataclass(frozen=True)
class SavePoint:
    """Snapshot of the active prompt taken before an isolated call"""
    prompt: Prompt
    label: str


class UsageTracker:
    """Accumulates token usage across every model call of a run."""

    def __init__(self):
        self.total = TokenUsage()
        self.last: Optional[TokenUsage] = None
        self.calls = 0

    def add(self, usage: TokenUsage) -> None:
        self.total = self.total + usage
        self.last = usage
        self.calls += 1


@dataclass
class Session:
    """
    Mutable state of one in-flight graph run.

    Never shared between concurrent runs. Messages are held in a tuple so
    entries already appended cannot be changed in place.
    """
    prompt: Prompt
    usage: UsageTracker = field(default_factory=UsageTracker)
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    _save_points: List[SavePoint] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def create(
        cls,
        model: ModelDescriptor,
        system_prompt: Optional[str] = None,
        messages: Sequence[BaseMessage] = (),
    ) -> "Session":
        initial: List[BaseMessage] = []
        if system_prompt:
            initial.append(SystemMessage(content=system_prompt))
        initial.extend(messages)
        return cls(prompt=Prompt(messages=tuple(initial), model=model))

    @property
    def messages(self) -> Tuple[BaseMessage, ...]:
        return self.prompt.messages

    @property
    def model(self) -> ModelDescriptor:
        return self.prompt.model

    @property
    def in_isolated_call(self) -> bool:
        return bool(self._save_points)

    # ------------------------------------------------------------------
    # Prompt updates
    # ------------------------------------------------------------------
    def append(self, message: BaseMessage) -> None:
        self.prompt = self.prompt.with_messages(self.prompt.messages + (message,))

    def system(self, text: str) -> None:
        self.append(SystemMessage(content=text))

    def user(self, text: str) -> None:
        self.append(HumanMessage(content=text))

    def assistant(self, text: str) -> None:
        self.append(AIMessage(content=text))

    def set_model(self, model: ModelDescriptor) -> None:
        self.prompt = self.prompt.with_model(model)

    def rewrite_prompt(self, prompt: Prompt) -> None:
        self.prompt = prompt

    # ------------------------------------------------------------------
    # Isolated calls
    # ------------------------------------------------------------------
    def begin_isolated_call(self, prompt: Prompt, label: str = "isolated") -> SavePoint:
        """Snapshot the active prompt and substitute `prompt` for it."""
        save_point = SavePoint(prompt=self.prompt, label=label)
        self._save_points.append(save_point)
        self.prompt = prompt
        return save_point

    def restore(self, save_point: SavePoint) -> None:
        """Put back the prompt captured by `save_point`."""
        if not self._save_points or self._save_points[-1] is not save_point:
            raise RuntimeError(f"Save point '{save_point.label}' is not the innermost active save point")
        self._save_points.pop()
        self.prompt = save_point.prompt

    @contextmanager
    def isolated_call(self, prompt: Prompt, label: str = "isolated") -> Iterator[SavePoint]:
        """
        Run a block against `prompt`, restoring the original prompt on every
        exit path (normal return, exception, or cancellation).
        """
        save_point = self.begin_isolated_call(prompt, label=label)
        try:
            yield save_point
        finally:
            self.restore(save_point)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def record(self, event: str, **data: Any) -> None:
        entry = {"event": event, **data}
        self.events.append(entry)
        logger.info(f"[SESSION] {event} | {data}")

    def warn(self, marker: str) -> None:
        self.warnings.append(marker)
        logger.warning(f"[SESSION] warning marker: {marker}")
