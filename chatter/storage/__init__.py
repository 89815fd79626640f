"""
Storage - external artifacts referenced by requests
"""

from chatter.storage.audio import AudioArtifact, AudioStorage

__all__ = ["AudioArtifact", "AudioStorage"]
