"""
Compress node - replaces older history with a model-written summary
"""

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.prompts import COMPRESSION_SYSTEM_PROMPT
from chatter.agents.assistant.routing import history_limit
from chatter.agents.assistant.state import ConversationRequest
from chatter.graph.session import Prompt, Session
from chatter.memory.history import (
    compose_compressed_history,
    estimate_tokens,
    format_transcript,
    split_history,
    truncate_summary,
)
from chatter.utils.errors import AnswerGenerationError, ModelClientError

NODE_NAME = "compress"


async def _summarize(older, session: Session, ctx: AssistantContext) -> str:
    prompt = Prompt(
        messages=(
            SystemMessage(content=COMPRESSION_SYSTEM_PROMPT),
            HumanMessage(content=format_transcript(older)),
        ),
        model=session.model.with_overrides(temperature=0.0),
    )
    with session.isolated_call(prompt, label="compression"):
        try:
            completion = await ctx.client.complete(session)
        except ModelClientError as e:
            raise AnswerGenerationError(f"History compression failed: {e}", node=NODE_NAME) from e
    return completion.text


async def compress_node(request: ConversationRequest, session: Session, ctx: AssistantContext) -> ConversationRequest:
    """
    Summarize older turns until the prompt fits under the threshold.

    The first pass keeps the configured recent tail; later passes keep only
    the latest message. After `max_compression_passes` (or when nothing is
    left to summarize) the run continues with a warning marker.
    """
    threshold = history_limit(session, ctx)
    tokens_before = estimate_tokens(session.messages)
    messages_before = len(session.messages)
    passes = 0

    while passes < ctx.max_compression_passes and estimate_tokens(session.messages) > threshold:
        keep = ctx.keep_recent_messages if passes == 0 else 1
        system, older, recent = split_history(session.messages, keep)
        if not older and keep > 1:
            system, older, recent = split_history(session.messages, 1)
        if not older:
            logger.warning("Nothing left to summarize, only the latest message remains")
            break

        passes += 1
        summary = await _summarize(older, session, ctx)
        budget = int(threshold * ctx.summary_budget_ratio)
        compressed = compose_compressed_history(system, truncate_summary(summary, budget), recent)

        if estimate_tokens(compressed) >= estimate_tokens(session.messages):
            logger.warning(f"Compression pass {passes} did not reduce history size")
            break
        session.rewrite_prompt(session.prompt.with_messages(compressed))
        logger.info(f"Compression pass {passes}: ~{estimate_tokens(compressed)} tokens")

    tokens_after = estimate_tokens(session.messages)
    session.record(
        "history_compressed",
        tokens_before=tokens_before,
        tokens_after=tokens_after,
        messages_before=messages_before,
        messages_after=len(session.messages),
        passes=passes,
    )
    if tokens_after > threshold:
        session.warn("history_still_too_long")
    return request
