"""
Assistant Agent - builds and runs the assistant graph

Workflow:
    START → transcribe → [history too long] compress → classify
          → [DIRECT_ANSWER] direct_answer → FINISH
          → [COLLECT_INFO]  collect_info → completion_check
                → [requires more info] FINISH
                → [ready for final answer] final_answer → FINISH
                → FINISH
"""

import asyncio
from typing import Any, Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from chatter.agents.assistant.context import (
    AssistantContext,
    default_answer_model,
    default_classifier_model,
    default_collect_info_model,
    default_transcription_model,
)
from chatter.agents.assistant.nodes import (
    classify_node,
    collect_info_node,
    completion_check_node,
    compress_node,
    direct_answer_node,
    final_answer_node,
    transcribe_node,
)
from chatter.agents.assistant.prompts import DEFAULT_SYSTEM_PROMPT
from chatter.agents.assistant.routing import (
    history_too_long,
    intent_is,
    ready_for_final_answer,
    requires_more_info,
)
from chatter.agents.assistant.state import (
    AgentResult,
    ChatTurn,
    ConversationRequest,
    DirectAnswer,
    StructuredAnswer,
)
from chatter.agents.structured.fixing import FixingCoordinator
from chatter.agents.structured.schemas import IntentClassification
from chatter.config.settings import settings
from chatter.graph.executor import FINISH, START, Graph, GraphExecutor
from chatter.graph.session import Session
from chatter.llm.client import ModelClient
from chatter.llm.models import ModelDescriptor
from chatter.memory.conversation_store import ConversationStateStore
from chatter.storage.audio import AudioStorage


def _turn_to_message(turn: ChatTurn) -> BaseMessage:
    if turn.role == "user":
        return HumanMessage(content=turn.content)
    if turn.role == "assistant":
        return AIMessage(content=turn.content)
    return SystemMessage(content=turn.content)


class AssistantAgent:
    """
    Conversational assistant: classify, then answer directly or collect
    details through a checklist.

    One instance can serve concurrent runs; each run gets its own Session.
    """

    def __init__(
        self,
        client: Optional[ModelClient] = None,
        store: Optional[ConversationStateStore] = None,
        audio_storage: Optional[AudioStorage] = None,
        fixing: Optional[FixingCoordinator] = None,
        system_prompt: Optional[str] = None,
        answer_model: Optional[ModelDescriptor] = None,
        classifier_model: Optional[ModelDescriptor] = None,
        collect_info_model: Optional[ModelDescriptor] = None,
        transcription_model: Optional[ModelDescriptor] = None,
        history_token_threshold: Optional[int] = None,
        max_steps: Optional[int] = None,
    ):
        self.client = client or ModelClient()
        self.store = store
        self.ctx = AssistantContext(
            client=self.client,
            fixing=fixing or FixingCoordinator(self.client),
            audio_storage=audio_storage or AudioStorage(),
            answer_model=answer_model or default_answer_model(),
            classifier_model=classifier_model or default_classifier_model(),
            collect_info_model=collect_info_model or default_collect_info_model(),
            transcription_model=transcription_model or default_transcription_model(),
            system_prompt=system_prompt,
            history_token_threshold=history_token_threshold or settings.history_token_threshold,
            classification_history_turns=settings.classification_history_turns,
            keep_recent_messages=settings.history_keep_recent_messages,
            max_compression_passes=settings.history_max_compression_passes,
            summary_budget_ratio=settings.history_summary_budget_ratio,
        )
        self.graph = self._build_graph()
        self.executor: GraphExecutor = self.graph.compile(max_steps=max_steps)

        storage_status = "with state store" if store else "without state store"
        logger.info(
            f"Initialized AssistantAgent (answer={self.ctx.answer_model.id}, "
            f"classifier={self.ctx.classifier_model.id}, {storage_status})"
        )

    def _build_graph(self) -> Graph:
        """Build the assistant graph."""
        ctx = self.ctx
        graph = Graph("assistant")

        graph.add_node("transcribe", lambda v, s: transcribe_node(v, s, ctx))
        graph.add_node("compress", lambda v, s: compress_node(v, s, ctx))
        graph.add_node("classify", lambda v, s: classify_node(v, s, ctx))
        graph.add_node("direct_answer", lambda v, s: direct_answer_node(v, s, ctx))
        graph.add_node("collect_info", lambda v, s: collect_info_node(v, s, ctx))
        graph.add_node("completion_check", lambda v, s: completion_check_node(v, s, ctx))
        graph.add_node("final_answer", lambda v, s: final_answer_node(v, s, ctx))

        graph.set_entry_point("transcribe")
        graph.add_edge("transcribe", "compress", condition=history_too_long(ctx), label="history too long")
        graph.add_edge("transcribe", "classify")
        graph.add_edge("compress", "classify")

        graph.add_edge("classify", "direct_answer", condition=intent_is(IntentClassification.DIRECT_ANSWER))
        graph.add_edge("classify", "collect_info", condition=intent_is(IntentClassification.COLLECT_INFO))
        graph.set_finish_point("direct_answer")

        graph.add_edge("collect_info", "completion_check")
        graph.add_edge(
            "completion_check", FINISH,
            condition=requires_more_info, transform=lambda v: v.answer, label="requires more info",
        )
        graph.add_edge(
            "completion_check", "final_answer",
            condition=ready_for_final_answer, label="ready for final answer",
        )
        graph.add_edge("completion_check", FINISH, transform=lambda v: v.answer)
        graph.set_finish_point("final_answer")
        return graph

    def create_session(self, request: ConversationRequest) -> Session:
        """Seed a Session with the system prompt, recent history and the user message."""
        limit = request.max_history_length
        if limit is None:
            limit = settings.max_history_length
        messages: List[BaseMessage] = [_turn_to_message(t) for t in request.recent_history(limit)]
        if not request.audio_reference:
            messages.append(HumanMessage(content=request.message))
        system_prompt = request.system_prompt or self.ctx.system_prompt or DEFAULT_SYSTEM_PROMPT
        return Session.create(self.ctx.answer_model, system_prompt=system_prompt, messages=messages)

    async def _with_stored_state(self, request: ConversationRequest) -> ConversationRequest:
        if self.store is None or not request.conversation_id or request.conversation_state is not None:
            return request
        stored = await self.store.load(request.conversation_id)
        if stored is None:
            return request
        return request.model_copy(update={"conversation_state": tuple(stored)})

    async def arun(self, request: ConversationRequest) -> AgentResult:
        """
        Run the graph for one user turn.

        Raises:
            AgentError: any terminal error of the run, unchanged
        """
        logger.info(f"\n{'='*80}\nASSISTANT REQUEST: {request.message or request.audio_reference}\n{'='*80}")
        request = await self._with_stored_state(request)
        session = self.create_session(request)

        output = await self.executor.run(request, session)
        result = self._build_result(output, session)

        if result.is_structured and self.store is not None and request.conversation_id:
            await self.store.save(request.conversation_id, result.conversation_state or [])

        logger.info(
            f"Run finished: intent={result.intent.value} calls={result.model_calls} "
            f"tokens={result.usage.total_tokens}"
        )
        return result

    def run(self, request: ConversationRequest) -> AgentResult:
        """Synchronous wrapper around `arun`."""
        return asyncio.run(self.arun(request))

    def _build_result(self, output: Any, session: Session) -> AgentResult:
        common = dict(
            usage=session.usage.total,
            model_calls=session.usage.calls,
            events=list(session.events),
            warnings=list(session.warnings),
        )
        if isinstance(output, DirectAnswer):
            return AgentResult(text=output.text, intent=IntentClassification.DIRECT_ANSWER, **common)
        if isinstance(output, StructuredAnswer):
            return AgentResult(
                structured=output.response,
                intent=IntentClassification.COLLECT_INFO,
                conversation_state=list(output.response.checklist),
                **common,
            )
        raise TypeError(f"Unexpected graph output: {type(output).__name__}")

    def health(self) -> Dict[str, Any]:
        """Provider, configured models and enabled features."""
        ctx = self.ctx
        return {
            "status": "ok",
            "provider": settings.llm_provider,
            "models": {
                "answer": ctx.answer_model.id,
                "classifier": ctx.classifier_model.id,
                "collect_info": ctx.collect_info_model.id,
                "transcription": ctx.transcription_model.id,
                "fixing": ctx.fixing.fixing_model.id,
            },
            "features": {
                "system_prompt": True,
                "history": True,
                "history_compression": True,
                "audio_transcription": True,
                "structured_output": True,
                "conversation_state": self.store is not None,
            },
            "fixing_retries": ctx.fixing.retries,
            "max_steps": self.executor.max_steps,
        }
