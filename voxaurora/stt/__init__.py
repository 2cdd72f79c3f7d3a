"""Speech-to-text subsystem for VoxAurora."""

from voxaurora.stt.transcriber import WhisperTranscriber, strip_special_tags
from voxaurora.stt.types import Transcript

__all__ = [
    "Transcript",
    "WhisperTranscriber",
    "strip_special_tags",
]
