"""
Application constants

Model catalog and default capability sets used to describe models.
"""

from typing import Dict

# ============================================================================
# Model catalog
# ============================================================================

DEFAULT_CONTEXT_LENGTH = 100_000

MODEL_CONTEXT_LENGTHS: Dict[str, int] = {
    "qwen/qwen3-coder": 200_000,
    "qwen/qwen3-8b": 100_000,
    "z-ai/glm-4.5-air:free": 100_000,
    "z-ai/glm-4.5-air": 100_000,
    "z-ai/glm-4.6": 100_000,
    "google/gemini-2.0-flash-001": 1_000_000,
    "google/gemini-2.5-flash": 1_000_000,
    "deepseek/deepseek-chat-v3-0324:free": 64_000,
    "deepseek/deepseek-chat": 64_000,
    "openai/gpt-5-nano": 50_000,
    "gpt-4o-mini": 128_000,
    "gpt-4o-audio-preview": 128_000,
}


# ============================================================================
# Audio
# ============================================================================

AUDIO_MIME_TYPES: Dict[str, str] = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".m4a": "audio/mp4",
    ".webm": "audio/webm",
    ".flac": "audio/flac",
}

DEFAULT_AUDIO_MIME_TYPE = "audio/wav"
