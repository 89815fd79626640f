"""
Collect info node - structured answer with a requirements checklist
"""

from loguru import logger

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.prompts import build_collect_info_system_prompt
from chatter.agents.assistant.state import ClassifiedRequest, StructuredAnswer
from chatter.agents.structured.schemas import StructuredResponse
from chatter.graph.session import Session
from chatter.utils.errors import AnswerGenerationError, ModelClientError

NODE_NAME = "collect_info"


async def collect_info_node(classified: ClassifiedRequest, session: Session, ctx: AssistantContext) -> StructuredAnswer:
    """
    Ask for a StructuredResponse and run it through the fixing coordinator.

    Raises:
        AnswerGenerationError: the primary model call failed
        StructuredOutputExhaustedError: still invalid after the repair budget
    """
    request = classified.request
    session.set_model(ctx.collect_info_model)
    session.system(build_collect_info_system_prompt(request.checklist))
    session.user(request.message)

    try:
        completion = await ctx.client.complete(session, structured=True)
    except ModelClientError as e:
        raise AnswerGenerationError(f"Structured answer generation failed: {e}", node=NODE_NAME) from e

    outcome = await ctx.fixing.parse(completion.text, StructuredResponse, session, node=NODE_NAME)
    response = outcome.value
    session.assistant(response.model_dump_json())
    logger.info(
        f"Structured answer '{response.title}' with {len(response.checklist)} checklist points "
        f"(repair calls: {outcome.repair_calls})"
    )
    return StructuredAnswer(response=response, request=request, repair_calls=outcome.repair_calls)
