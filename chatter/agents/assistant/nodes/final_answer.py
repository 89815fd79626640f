"""
Final answer node - complete answer once every checklist point is resolved
"""

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.prompts import FINAL_ANSWER_SYSTEM_PROMPT, build_final_answer_input
from chatter.agents.assistant.state import CheckedAnswer, StructuredAnswer
from chatter.agents.structured.schemas import StructuredResponse
from chatter.graph.session import Session
from chatter.utils.errors import AnswerGenerationError, ModelClientError

NODE_NAME = "final_answer"


async def final_answer_node(checked: CheckedAnswer, session: Session, ctx: AssistantContext) -> StructuredAnswer:
    request = checked.answer.request
    session.system(FINAL_ANSWER_SYSTEM_PROMPT)
    session.user(build_final_answer_input(request.message, checked.answer.response.checklist))

    try:
        completion = await ctx.client.complete(session, structured=True)
    except ModelClientError as e:
        raise AnswerGenerationError(f"Final answer generation failed: {e}", node=NODE_NAME) from e

    outcome = await ctx.fixing.parse(completion.text, StructuredResponse, session, node=NODE_NAME)
    session.assistant(outcome.value.model_dump_json())
    return StructuredAnswer(
        response=outcome.value,
        request=request,
        repair_calls=checked.answer.repair_calls + outcome.repair_calls,
    )
