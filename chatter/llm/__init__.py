"""
LLM layer - Model descriptors, client, and response utilities
"""

from chatter.llm.client import ModelClient, create_llm
from chatter.llm.models import (
    Capability,
    Completion,
    ModelDescriptor,
    STRUCTURED_CAPABILITIES,
    TEXT_CAPABILITIES,
    TokenUsage,
    describe_model,
)
from chatter.llm.response_utils import (
    extract_json_from_markdown,
    extract_text_from_response,
    extract_usage_from_response,
)

__all__ = [
    "ModelClient",
    "create_llm",
    "Capability",
    "Completion",
    "ModelDescriptor",
    "STRUCTURED_CAPABILITIES",
    "TEXT_CAPABILITIES",
    "TokenUsage",
    "describe_model",
    "extract_json_from_markdown",
    "extract_text_from_response",
    "extract_usage_from_response",
]
