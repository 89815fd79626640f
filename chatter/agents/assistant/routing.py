"""
Assistant routing - edge guards of the assistant graph
"""

from loguru import logger

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.state import CheckedAnswer, ClassifiedRequest
from chatter.agents.structured.schemas import IntentClassification
from chatter.graph.executor import Guard
from chatter.graph.session import Session
from chatter.memory.history import estimate_tokens, history_threshold


def history_limit(session: Session, ctx: AssistantContext) -> int:
    return ctx.history_token_threshold or history_threshold(session.model)


def is_history_too_long(session: Session, ctx: AssistantContext) -> bool:
    """Whether the active prompt's estimated size is over the compression threshold."""
    size = estimate_tokens(session.messages)
    limit = history_limit(session, ctx)
    too_long = size > limit
    if too_long:
        logger.info(f"History too long: ~{size} tokens > {limit}")
    return too_long


def history_too_long(ctx: AssistantContext) -> Guard:
    return lambda value, session: is_history_too_long(session, ctx)


def intent_is(intent: IntentClassification) -> Guard:
    def guard(value: ClassifiedRequest, session: Session) -> bool:
        return value.intent is intent

    return guard


def requires_more_info(value: CheckedAnswer, session: Session) -> bool:
    return value.status.requires_more_info


def ready_for_final_answer(value: CheckedAnswer, session: Session) -> bool:
    return value.status.ready_for_final_answer
