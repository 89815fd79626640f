"""
LLM response utilities for handling multi-format model outputs.

Supports both:
- Simple string responses
- Structured content blocks with reasoning
"""

import re
from typing import Any

from loguru import logger

from chatter.llm.models import TokenUsage


def extract_text_from_response(response: Any) -> str:
    """
    Extract text content from LLM response (handles all formats).

    Supports:
    - Simple string: "text here"
    - Structured blocks: [{'type': 'reasoning', ...}, {'type': 'text', 'text': '...'}]
    - LangChain AIMessage with content attribute
    """
    content = response.content if hasattr(response, "content") else response

    if not content:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for block in content:
            if isinstance(block, dict):
                if block.get("type") == "text" and "text" in block:
                    text_parts.append(block["text"])
                elif "text" in block and block.get("type") != "reasoning":
                    text_parts.append(block["text"])
            elif isinstance(block, str):
                text_parts.append(block)

        result = "".join(text_parts)
        if result:
            return result

        content_preview = str(content)[:200]
        logger.warning(f"No text blocks found in structured response: {content_preview}")
        return ""

    return str(content)


def extract_usage_from_response(response: Any) -> TokenUsage:
    """
    Read token counters from a LangChain message.

    Prefers the standard `usage_metadata`; falls back to the OpenAI-style
    `token_usage` entry in `response_metadata`. Missing counters are zero.
    """
    usage = getattr(response, "usage_metadata", None)
    if usage:
        prompt_tokens = int(usage.get("input_tokens", 0) or 0)
        completion_tokens = int(usage.get("output_tokens", 0) or 0)
        total_tokens = int(usage.get("total_tokens", 0) or prompt_tokens + completion_tokens)
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
        )

    metadata = getattr(response, "response_metadata", None) or {}
    token_usage = metadata.get("token_usage") or {}
    if token_usage:
        prompt_tokens = int(token_usage.get("prompt_tokens", 0) or 0)
        completion_tokens = int(token_usage.get("completion_tokens", 0) or 0)
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=int(token_usage.get("total_tokens", 0) or prompt_tokens + completion_tokens),
        )

    return TokenUsage()


def extract_json_from_markdown(text: str) -> str:
    """
    Extract JSON from a markdown code block anywhere in the text.

    Returns the content of the first ``` or ```json block, or the stripped
    original text when there is no block.

    Examples:
        >>> extract_json_from_markdown('Here:\\n```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    pattern = r"```(?:json)?\s*\n(.*?)\n?```"
    match = re.search(pattern, text, re.DOTALL | re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return text.strip()
