"""Energy-based voice activity segmentation of a frame stream."""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np

from voxaurora.audio.types import AudioFrame, Utterance

logger = logging.getLogger(__name__)


class SegmenterState(str, Enum):
    """Whether the segmenter is between utterances or inside one."""

    IDLE = "idle"
    IN_SPEECH = "in_speech"


def frame_energy(samples: np.ndarray) -> float:
    """Compute RMS amplitude of int16 audio data, normalized to 0.0-1.0."""
    if samples.size == 0:
        return 0.0
    float_data = samples.astype(np.float32) / 32768.0
    return float(np.sqrt(np.mean(float_data ** 2)))


class SpeechSegmenter:
    """Turns frames into utterances using an RMS threshold.

    - ``start_frames`` (N): consecutive loud frames needed to open speech.
    - ``hangover_frames`` (H): consecutive quiet frames needed to close it.
      Quiet runs shorter than H are kept as part of the utterance.
    - ``min_frames``: shorter utterances are discarded as noise.
    - ``max_frames``: longer utterances are force-closed and emitted.

    Emitted utterances start at the first loud frame of the onset run and
    end at the last frame before the closing quiet run.
    """

    def __init__(
        self,
        threshold: float,
        start_frames: int,
        hangover_frames: int,
        min_frames: int = 1,
        max_frames: int | None = None,
    ) -> None:
        if start_frames < 1 or hangover_frames < 1 or min_frames < 1:
            raise ValueError("frame counts must be >= 1")
        if max_frames is not None and max_frames < max(start_frames, min_frames):
            raise ValueError("max_frames must cover start_frames and min_frames")
        self._threshold = threshold
        self._start_frames = start_frames
        self._hangover_frames = hangover_frames
        self._min_frames = min_frames
        self._max_frames = max_frames

        self._state = SegmenterState.IDLE
        self._onset: list[AudioFrame] = []
        self._speech: list[AudioFrame] = []
        self._silence: list[AudioFrame] = []
        self._discarded: int = 0

    @property
    def state(self) -> SegmenterState:
        return self._state

    @property
    def discarded(self) -> int:
        """Number of utterances dropped for being shorter than ``min_frames``."""
        return self._discarded

    def reset(self) -> None:
        """Forget any partial utterance and return to idle."""
        self._state = SegmenterState.IDLE
        self._onset.clear()
        self._speech = []
        self._silence.clear()

    def push(self, frame: AudioFrame) -> Utterance | None:
        """Feed one frame; return an utterance if this frame completed one."""
        loud = frame_energy(frame.samples) > self._threshold

        if self._state is SegmenterState.IDLE:
            if not loud:
                self._onset.clear()
                return None
            self._onset.append(frame)
            if len(self._onset) >= self._start_frames:
                self._state = SegmenterState.IN_SPEECH
                self._speech = self._onset
                self._onset = []
                logger.debug("Speech started at frame %d", self._speech[0].sequence)
            return None

        if loud:
            if self._silence:
                # A pause shorter than the hangover window belongs to the speech.
                self._speech.extend(self._silence)
                self._silence.clear()
            self._speech.append(frame)
        else:
            self._silence.append(frame)
            if len(self._silence) >= self._hangover_frames:
                return self._close("hangover")

        if (
            self._max_frames is not None
            and len(self._speech) + len(self._silence) >= self._max_frames
        ):
            return self._close("max duration")
        return None

    def feed(self, frames: list[AudioFrame]) -> list[Utterance]:
        """Push a batch of frames, returning every utterance completed."""
        utterances = []
        for frame in frames:
            utterance = self.push(frame)
            if utterance is not None:
                utterances.append(utterance)
        return utterances

    def _close(self, reason: str) -> Utterance | None:
        speech = self._speech
        self.reset()

        if len(speech) < self._min_frames:
            self._discarded += 1
            logger.debug(
                "Discarding %d-frame utterance (< %d frames)",
                len(speech),
                self._min_frames,
            )
            return None

        utterance = Utterance(
            samples=np.concatenate([f.samples for f in speech]),
            sample_rate=speech[0].sample_rate,
            start_time=speech[0].start_time,
            end_time=speech[-1].end_time,
            frame_count=len(speech),
            first_sequence=speech[0].sequence,
            last_sequence=speech[-1].sequence,
        )
        logger.info(
            "Utterance closed (%s): %.2fs-%.2fs, %d frames",
            reason,
            utterance.start_time,
            utterance.end_time,
            utterance.frame_count,
        )
        return utterance
