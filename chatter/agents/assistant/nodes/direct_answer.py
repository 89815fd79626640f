"""
Direct answer node - free-text answer from the full conversation
"""

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.state import ClassifiedRequest, DirectAnswer
from chatter.graph.session import Session
from chatter.utils.errors import AnswerGenerationError, ModelClientError

NODE_NAME = "direct_answer"


async def direct_answer_node(classified: ClassifiedRequest, session: Session, ctx: AssistantContext) -> DirectAnswer:
    session.set_model(ctx.answer_model)
    try:
        completion = await ctx.client.complete(session)
    except ModelClientError as e:
        raise AnswerGenerationError(f"Answer generation failed: {e}", node=NODE_NAME) from e

    session.assistant(completion.text)
    return DirectAnswer(text=completion.text, request=classified.request)
