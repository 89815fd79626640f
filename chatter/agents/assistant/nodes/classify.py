"""
Classify node - decides between a direct answer and info collection
"""

import re

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.prompts import CLASSIFICATION_SYSTEM_PROMPT, build_classification_input
from chatter.agents.assistant.state import ClassifiedRequest, ConversationRequest
from chatter.agents.structured.schemas import IntentAnalysis, IntentClassification
from chatter.agents.structured.validator import validate_structured
from chatter.graph.session import Prompt, Session
from chatter.utils.errors import ClassificationError, ModelClientError

NODE_NAME = "classify"

DEFAULT_INTENT = IntentClassification.COLLECT_INFO


def parse_intent(text: str) -> IntentClassification:
    """
    Read the intent from model output: a JSON object or a bare label.

    Raises:
        ClassificationError: the output names no known label
    """
    result = validate_structured(text, IntentAnalysis)
    if result.ok:
        return result.value.intent_type

    label = re.sub(r"[^A-Z_]", "", (text or "").strip().upper())
    try:
        return IntentClassification(label)
    except ValueError:
        raise ClassificationError(f"Unknown intent label: {text!r}", node=NODE_NAME) from None


def _history_lines(request: ConversationRequest, turns: int):
    lines = []
    for turn in request.recent_history(turns):
        role = "User" if turn.role == "user" else "Assistant"
        lines.append(f"{role}: {turn.content}")
    return lines


async def classify_node(request: ConversationRequest, session: Session, ctx: AssistantContext) -> ClassifiedRequest:
    """
    Classify the request once per run. Failures never abort the run: they
    default to COLLECT_INFO.
    """
    user_input = build_classification_input(
        request.message,
        _history_lines(request, ctx.classification_history_turns),
        request.checklist,
    )
    prompt = Prompt(
        messages=(SystemMessage(content=CLASSIFICATION_SYSTEM_PROMPT), HumanMessage(content=user_input)),
        model=ctx.classifier_model,
    )

    try:
        with session.isolated_call(prompt, label="classification"):
            completion = await ctx.client.complete(session, structured=True)
        intent = parse_intent(completion.text)
    except ModelClientError as e:
        logger.warning(f"Classification call failed, defaulting to {DEFAULT_INTENT.value}: {e}")
        session.record("intent_defaulted", reason=str(e))
        intent = DEFAULT_INTENT
    except ClassificationError as e:
        logger.warning(f"Invalid classification, defaulting to {DEFAULT_INTENT.value}: {e}")
        session.record("intent_defaulted", reason=str(e))
        intent = DEFAULT_INTENT

    logger.info(f"Request classified as: {intent.value}")
    session.record("intent_classified", intent=intent.value)
    return ClassifiedRequest(intent=intent, request=request)
