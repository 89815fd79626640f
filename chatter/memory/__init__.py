"""
Memory - history compression helpers and conversation state persistence
"""

from chatter.memory.conversation_store import ConversationStateStore
from chatter.memory.history import (
    compose_compressed_history,
    estimate_tokens,
    history_threshold,
    split_history,
)

__all__ = [
    "ConversationStateStore",
    "compose_compressed_history",
    "estimate_tokens",
    "history_threshold",
    "split_history",
]
