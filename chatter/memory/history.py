"""
History size estimate and compressed-history composition

Token counts are estimated from message text (about 4 characters per
token); the estimate only has to be consistent between the check that
triggers compression and the check after it.
"""

from typing import List, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, SystemMessage

from chatter.config.settings import settings
from chatter.llm.models import ModelDescriptor
from chatter.llm.response_utils import extract_text_from_response

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD_TOKENS = 4

SUMMARY_PREFIX = "Summary of the earlier conversation:\n"


def estimate_message_tokens(message: BaseMessage) -> int:
    text = extract_text_from_response(message)
    return len(text) // CHARS_PER_TOKEN + MESSAGE_OVERHEAD_TOKENS


def estimate_tokens(messages: Sequence[BaseMessage]) -> int:
    """Estimated prompt size of `messages` in tokens."""
    return sum(estimate_message_tokens(m) for m in messages)


def history_threshold(model: ModelDescriptor) -> int:
    """
    Token size above which history must be compressed.

    `settings.history_token_threshold` wins when set; otherwise a fixed
    fraction of the model's context length.
    """
    if settings.history_token_threshold:
        return settings.history_token_threshold
    return int(model.context_length * settings.history_compression_ratio)


def split_history(
    messages: Sequence[BaseMessage], keep_recent: int
) -> Tuple[List[BaseMessage], List[BaseMessage], List[BaseMessage]]:
    """
    Split a prompt into (leading system messages, older turns, recent tail).

    Only the leading run of system messages is held fixed; a system message
    later in the history stays in place, in the older part or in the tail.
    The tail starts at the `keep_recent`-th last non-system message, so the
    current user message always survives compression.
    """
    prefix_end = 0
    while prefix_end < len(messages) and isinstance(messages[prefix_end], SystemMessage):
        prefix_end += 1
    system = list(messages[:prefix_end])
    body = list(messages[prefix_end:])

    keep = max(keep_recent, 1)
    turn_positions = [i for i, m in enumerate(body) if not isinstance(m, SystemMessage)]
    if len(turn_positions) <= keep:
        return system, [], body
    start = turn_positions[-keep]
    return system, body[:start], body[start:]


def truncate_summary(summary: str, max_tokens: int) -> str:
    max_chars = max(max_tokens, 1) * CHARS_PER_TOKEN
    summary = summary.strip()
    if len(summary) <= max_chars:
        return summary
    return summary[:max_chars].rstrip() + "..."


def compose_compressed_history(
    system: Sequence[BaseMessage],
    summary: str,
    recent: Sequence[BaseMessage],
) -> List[BaseMessage]:
    """System messages first, then the summary, then the recent tail."""
    messages: List[BaseMessage] = list(system)
    messages.append(AIMessage(content=f"{SUMMARY_PREFIX}{summary}"))
    messages.extend(recent)
    return messages


def format_transcript(messages: Sequence[BaseMessage]) -> str:
    """Plain-text rendering of turns for summarization prompts."""
    lines = []
    for message in messages:
        role = "User" if message.type == "human" else "Assistant" if message.type == "ai" else message.type
        lines.append(f"{role}: {extract_text_from_response(message)}")
    return "\n".join(lines)
