"""Audio capture, buffering, and speech segmentation."""

from voxaurora.audio.frame_queue import FrameQueue
from voxaurora.audio.microphone import MicrophoneSource, list_input_devices
from voxaurora.audio.resampler import resample
from voxaurora.audio.segmenter import SegmenterState, SpeechSegmenter
from voxaurora.audio.types import AudioFrame, Utterance

__all__ = [
    "AudioFrame",
    "FrameQueue",
    "MicrophoneSource",
    "SegmenterState",
    "SpeechSegmenter",
    "Utterance",
    "list_input_devices",
    "resample",
]
