"""
Assistant graph nodes
"""

from chatter.agents.assistant.nodes.transcribe import transcribe_node
from chatter.agents.assistant.nodes.compress import compress_node
from chatter.agents.assistant.nodes.classify import classify_node
from chatter.agents.assistant.nodes.direct_answer import direct_answer_node
from chatter.agents.assistant.nodes.collect_info import collect_info_node
from chatter.agents.assistant.nodes.completion_check import completion_check_node
from chatter.agents.assistant.nodes.final_answer import final_answer_node

__all__ = [
    "transcribe_node",
    "compress_node",
    "classify_node",
    "direct_answer_node",
    "collect_info_node",
    "completion_check_node",
    "final_answer_node",
]
