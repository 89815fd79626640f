"""
Assistant agent - intent classification, direct answers and checklist collection
"""

from chatter.agents.assistant.agent import AssistantAgent
from chatter.agents.assistant.state import (
    AgentResult,
    ChatTurn,
    ConversationRequest,
)

__all__ = ["AssistantAgent", "AgentResult", "ChatTurn", "ConversationRequest"]
