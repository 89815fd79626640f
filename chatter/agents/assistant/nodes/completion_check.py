"""
Completion check node - is the checklist fully resolved?
"""

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.state import CheckedAnswer, StructuredAnswer
from chatter.agents.structured.schemas import CompletionStatus
from chatter.graph.session import Session


async def completion_check_node(answer: StructuredAnswer, session: Session, ctx: AssistantContext) -> CheckedAnswer:
    status = CompletionStatus.from_response(answer.response)
    resolved = sum(1 for item in answer.response.checklist if item.is_resolved)
    session.record(
        "completion_checked",
        resolved=resolved,
        total=len(answer.response.checklist),
        requires_more_info=status.requires_more_info,
        ready_for_final_answer=status.ready_for_final_answer,
    )
    return CheckedAnswer(status=status, answer=answer)
