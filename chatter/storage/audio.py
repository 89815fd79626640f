"""
Audio storage - resolves audio references to files on disk
"""

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from chatter.config.constants import AUDIO_MIME_TYPES, DEFAULT_AUDIO_MIME_TYPE
from chatter.config.settings import settings
from chatter.utils.errors import ValidationError


@dataclass(frozen=True)
class AudioArtifact:
    """A validated audio file ready to be sent to a model"""
    path: Path
    mime_type: str
    size: int

    def read_base64(self) -> str:
        return base64.b64encode(self.path.read_bytes()).decode("ascii")


class AudioStorage:
    """
    Relative references resolve against `root` (settings.audio_root, then the
    current directory). All checks are synchronous and happen before any
    model call.
    """

    def __init__(self, root: Optional[str] = None):
        root = root or settings.audio_root
        self.root = Path(root) if root else None

    def resolve(self, reference: str) -> Path:
        path = Path(reference).expanduser()
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path

    def validate(self, reference: str, node: Optional[str] = None) -> AudioArtifact:
        """
        Check that the referenced audio exists and is non-empty.

        Raises:
            ValidationError: reference is blank, missing, not a file, or empty
        """
        if not reference or not reference.strip():
            raise ValidationError("Audio reference is empty", node=node)

        path = self.resolve(reference)
        if not path.is_file():
            raise ValidationError(f"Audio file not found: {path}", node=node)

        size = path.stat().st_size
        if size == 0:
            raise ValidationError(f"Audio file is empty: {path}", node=node)

        mime_type = AUDIO_MIME_TYPES.get(path.suffix.lower(), DEFAULT_AUDIO_MIME_TYPE)
        logger.debug(f"Audio artifact ok: {path} ({size} bytes, {mime_type})")
        return AudioArtifact(path=path, mime_type=mime_type, size=size)
