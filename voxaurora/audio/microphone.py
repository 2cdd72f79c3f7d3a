"""Microphone capture feeding fixed-size frames into a FrameQueue."""

import logging

import numpy as np
import sounddevice as sd

from voxaurora.audio.frame_queue import FrameQueue
from voxaurora.audio.types import AudioFrame
from voxaurora.config import AUDIO_FRAME_DURATION
from voxaurora.errors import AudioDeviceError

logger = logging.getLogger(__name__)


def list_input_devices() -> list[tuple[int, str]]:
    """Return ``(index, name)`` for every device with input channels."""
    devices = sd.query_devices()
    return [
        (index, device["name"])
        for index, device in enumerate(devices)
        if device.get("max_input_channels", 0) > 0
    ]


def resolve_device(selection: str | None) -> int | None:
    """Map a user's device choice to an input device index.

    ``None`` (the default input device) is returned for an empty,
    non-numeric or unknown selection.
    """
    if not selection:
        return None
    try:
        index = int(selection.strip())
    except ValueError:
        logger.warning("Invalid device selection %r — using default device", selection)
        return None
    if index not in {i for i, _ in list_input_devices()}:
        logger.warning("No input device %d — using default device", index)
        return None
    return index


class MicrophoneSource:
    """Streams mono int16 frames from an input device into a FrameQueue.

    The sounddevice callback runs on the PortAudio thread; its only job is
    to copy the block into an :class:`AudioFrame` and push it.
    """

    def __init__(
        self,
        queue: FrameQueue,
        device: int | None = None,
        frame_duration: float = AUDIO_FRAME_DURATION,
    ) -> None:
        self._queue = queue
        self._device = device
        self._frame_duration = frame_duration
        self._stream: sd.InputStream | None = None
        self._sample_rate: int = 0
        self._sequence: int = 0
        self._status_errors: int = 0

    def start(self) -> None:
        """Open the input stream.  Raises AudioDeviceError on failure."""
        try:
            info = sd.query_devices(self._device, kind="input")
            self._sample_rate = int(info["default_samplerate"])
            blocksize = max(1, int(self._sample_rate * self._frame_duration))
            self._stream = sd.InputStream(
                device=self._device,
                samplerate=self._sample_rate,
                channels=1,
                dtype="int16",
                blocksize=blocksize,
                callback=self._callback,
            )
            self._stream.start()
        except Exception as exc:
            self._stream = None
            raise AudioDeviceError(f"Cannot open audio input device: {exc}") from exc

        logger.info(
            "Capturing from %s at %d Hz (%d samples/frame)",
            info.get("name", "default device"),
            self._sample_rate,
            blocksize,
        )

    def stop(self) -> None:
        """Stop and close the stream.  Safe to call more than once."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception:
            logger.warning("Error closing audio stream", exc_info=True)

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def status_errors(self) -> int:
        """Callbacks that reported an input overflow or other stream status."""
        return self._status_errors

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            self._status_errors += 1
        samples = indata[:, 0].copy()
        samples.flags.writeable = False
        frame = AudioFrame(
            samples=samples, sample_rate=self._sample_rate, sequence=self._sequence
        )
        self._sequence += 1
        self._queue.push(frame)
