"""
Configuration layer - Settings and constants
"""

from chatter.config.settings import settings, Settings, PROJECT_ROOT
from chatter.config.constants import (
    AUDIO_MIME_TYPES,
    DEFAULT_AUDIO_MIME_TYPE,
    DEFAULT_CONTEXT_LENGTH,
    MODEL_CONTEXT_LENGTHS,
)

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "AUDIO_MIME_TYPES",
    "DEFAULT_AUDIO_MIME_TYPE",
    "DEFAULT_CONTEXT_LENGTH",
    "MODEL_CONTEXT_LENGTHS",
]
