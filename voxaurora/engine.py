"""Core voice pipeline: capture -> segment -> transcribe -> gate -> match -> dispatch.

Two execution contexts share only the FrameQueue and the WakeGate:

- the sounddevice callback thread pushes frames into the FrameQueue;
- the asyncio side runs a segmentation task (FrameQueue -> Utterances) and
  a single utterance worker that handles one utterance to completion
  before taking the next, so commands are dispatched one at a time and in
  the order they were spoken.

Blocking collaborators (whisper, embeddings) run through
``asyncio.to_thread`` under ``asyncio.wait_for``; a failure or timeout
drops the utterance and the loop carries on.
"""

import asyncio
import logging
from typing import Any, Callable

from voxaurora.audio.frame_queue import FrameQueue
from voxaurora.audio.microphone import MicrophoneSource
from voxaurora.audio.resampler import resample
from voxaurora.audio.segmenter import SpeechSegmenter
from voxaurora.audio.types import Utterance
from voxaurora.commands.dispatcher import ActionDispatcher, resolve_action
from voxaurora.commands.matcher import CommandMatcher
from voxaurora.commands.types import MatchResult
from voxaurora.config import (
    AUDIO_FRAME_DURATION,
    EMBEDDING_TIMEOUT,
    FRAME_QUEUE_SECONDS,
    STT_SAMPLE_RATE,
    STT_TIMEOUT,
    UTTERANCE_QUEUE_SIZE,
    VAD_ENERGY_THRESHOLD,
    VAD_HANGOVER_DURATION,
    VAD_MAX_UTTERANCE_DURATION,
    VAD_MIN_UTTERANCE_DURATION,
    VAD_START_DURATION,
    frames_for,
)
from voxaurora.stt.transcriber import WhisperTranscriber
from voxaurora.stt.types import Transcript
from voxaurora.text.normalizer import TranscriptNormalizer
from voxaurora.wake.gate import WakeGate
from voxaurora.wake.types import GateDecision, WakeState

logger = logging.getLogger(__name__)

# How long the segmentation task waits on the frame queue before re-checking
# whether the engine is still running.
_POP_TIMEOUT: float = 0.5


def default_segmenter(frame_duration: float = AUDIO_FRAME_DURATION) -> SpeechSegmenter:
    """Build a SpeechSegmenter from the configured VAD durations."""
    return SpeechSegmenter(
        threshold=VAD_ENERGY_THRESHOLD,
        start_frames=frames_for(VAD_START_DURATION, frame_duration),
        hangover_frames=frames_for(VAD_HANGOVER_DURATION, frame_duration),
        min_frames=frames_for(VAD_MIN_UTTERANCE_DURATION, frame_duration),
        max_frames=frames_for(VAD_MAX_UTTERANCE_DURATION, frame_duration),
    )


class VoiceEngine:
    """Owns the pipeline tasks and the start/stop lifecycle."""

    def __init__(
        self,
        *,
        transcriber: WhisperTranscriber,
        normalizer: TranscriptNormalizer,
        matcher: CommandMatcher,
        dispatcher: ActionDispatcher,
        gate: WakeGate,
        device: int | None = None,
        frame_duration: float = AUDIO_FRAME_DURATION,
        segmenter: SpeechSegmenter | None = None,
        stt_timeout: float = STT_TIMEOUT,
        embedding_timeout: float = EMBEDDING_TIMEOUT,
    ) -> None:
        self._transcriber = transcriber
        self._normalizer = normalizer
        self._matcher = matcher
        self._dispatcher = dispatcher
        self._gate = gate
        self._stt_timeout = stt_timeout
        self._embedding_timeout = embedding_timeout

        self._frames = FrameQueue(frames_for(FRAME_QUEUE_SECONDS, frame_duration))
        self._source = MicrophoneSource(self._frames, device=device, frame_duration=frame_duration)
        self._segmenter = segmenter or default_segmenter(frame_duration)
        self._utterances: asyncio.Queue[Utterance] = asyncio.Queue(maxsize=UTTERANCE_QUEUE_SIZE)

        self._segment_task: asyncio.Task | None = None
        self._utterance_task: asyncio.Task | None = None
        self._running: bool = False
        self._stopping: bool = False
        self._dropped_utterances: int = 0

    async def start(self) -> None:
        """Start collaborators, open the microphone, and begin processing.

        Raises AudioDeviceError if the input device cannot be opened.
        """
        self._stopping = False
        await self._dispatcher.start()
        await self._normalizer.start()
        try:
            self._source.start()
        except Exception:
            await self._normalizer.stop()
            await self._dispatcher.stop()
            raise

        self._running = True
        self._segment_task = asyncio.create_task(self._segment_loop())
        self._utterance_task = asyncio.create_task(self._utterance_loop())
        logger.info("Voice engine started (wake state=%s)", self.state.value)

    async def stop(self) -> None:
        """Stop capture, abandon pending work, and release collaborators."""
        self._stopping = True
        self._running = False

        self._source.stop()
        self._frames.close()

        for task in (self._utterance_task, self._segment_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._segment_task = None
        self._utterance_task = None

        while not self._utterances.empty():
            self._utterances.get_nowait()

        await self._normalizer.stop()
        await self._dispatcher.stop()
        logger.info(
            "Voice engine stopped (dropped frames=%d, dropped utterances=%d)",
            self._frames.dropped,
            self._dropped_utterances,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> WakeState:
        return self._gate.state

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def dropped_frames(self) -> int:
        return self._frames.dropped

    @property
    def dropped_utterances(self) -> int:
        return self._dropped_utterances

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    async def _segment_loop(self) -> None:
        """Drain frames from the capture thread and cut them into utterances."""
        while self._running:
            frames = await asyncio.to_thread(self._frames.pop_batch, _POP_TIMEOUT)
            if not frames or not self._running:
                continue
            for utterance in self._segmenter.feed(frames):
                self._enqueue(utterance)

    def _enqueue(self, utterance: Utterance) -> None:
        if self._utterances.full():
            stale = self._utterances.get_nowait()
            self._dropped_utterances += 1
            logger.warning(
                "Utterance backlog full — dropping stale utterance at %.2fs",
                stale.start_time,
            )
        self._utterances.put_nowait(utterance)

    async def _utterance_loop(self) -> None:
        """Process utterances one at a time, in order."""
        while self._running:
            try:
                utterance = await asyncio.wait_for(self._utterances.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            if not self._running:
                break
            try:
                await self.process_utterance(utterance)
            except Exception:
                logger.warning("Error processing utterance", exc_info=True)

    # ------------------------------------------------------------------
    # Per-utterance pipeline
    # ------------------------------------------------------------------

    async def process_utterance(self, utterance: Utterance) -> MatchResult | None:
        """Transcribe *utterance* and run it through gate, matcher, dispatcher."""
        transcript = await self._call_blocking(
            "Transcription", self._stt_timeout, self._transcribe, utterance
        )
        if transcript is None:
            return None
        return await self.process_transcript(transcript)

    def _transcribe(self, utterance: Utterance) -> Transcript | None:
        """Resample and transcribe.  Runs in a worker thread."""
        audio = resample(utterance.samples, utterance.sample_rate, STT_SAMPLE_RATE)
        return self._transcriber.transcribe(audio, utterance.start_time, utterance.end_time)

    async def process_transcript(self, transcript: Transcript) -> MatchResult | None:
        """Gate, normalize, match and dispatch one raw transcript.

        Returns the MatchResult that was dispatched, or None if the
        transcript was suppressed or dropped.
        """
        if self._stopping:
            return None
        logger.info("Heard: %s", transcript.text)

        decision = self._gate.process(transcript)
        if decision is not GateDecision.FORWARD:
            return None

        text = await self._normalizer.normalize(transcript.text)
        if not text:
            logger.info("Transcript empty after normalization — skipping")
            return None

        result = await self._call_blocking(
            "Command matching", self._embedding_timeout, self._matcher.match, text
        )
        if result is None:
            return None

        if self._stopping:
            logger.info("Shutting down — not dispatching '%s'", text)
            return None

        action = resolve_action(result)
        ok = await self._dispatcher.dispatch(result)
        if ok:
            logger.info("Dispatched %s", action)
        else:
            logger.warning("Dispatch failed for %s", action)
        return result

    async def _call_blocking(
        self, what: str, timeout: float, func: Callable[..., Any], *args: Any
    ) -> Any:
        """Run *func* in a worker thread; None on error or timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs — dropping utterance", what, timeout)
        except Exception:
            logger.warning("%s failed — dropping utterance", what, exc_info=True)
        return None
