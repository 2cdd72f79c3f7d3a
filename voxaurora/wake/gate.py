"""Wake/sleep state machine driven by raw transcripts.

The same phrase toggles both ways.  Wake utterances are never forwarded
for command matching, even when they contain more words ("aurora open
terminal" only wakes the system).
"""

import logging
import threading
import time
from typing import Callable

from voxaurora.stt.types import Transcript
from voxaurora.wake.phrases import WakePhrases
from voxaurora.wake.types import GateDecision, WakeState

logger = logging.getLogger(__name__)


class WakeGate:
    """Owns the process-wide :class:`WakeState`.

    A wake phrase spoken less than ``debounce_seconds`` after the end of
    the utterance that last toggled is ignored, so one noisy utterance (or
    its immediate repeat) cannot flip the state twice.  Distances are
    measured on the audio stream timestamps carried by the transcript, so
    slow transcription does not widen the gap; transcripts without
    timestamps fall back to the clock.
    """

    def __init__(
        self,
        phrases: WakePhrases,
        *,
        debounce_seconds: float = 1.5,
        initial_state: WakeState = WakeState.ASLEEP,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._phrases = phrases
        self._debounce = debounce_seconds
        self._clock = clock
        self._state = initial_state
        self._last_toggle: float | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> WakeState:
        with self._lock:
            return self._state

    @property
    def is_active(self) -> bool:
        return self.state is WakeState.ACTIVE

    def process(self, transcript: Transcript) -> GateDecision:
        """Scan one raw transcript and decide what happens to it."""
        match = self._phrases.match(transcript.text)

        with self._lock:
            if match is None:
                if self._state is WakeState.ACTIVE:
                    return GateDecision.FORWARD
                logger.debug("Asleep — ignoring: %s", transcript.text)
                return GateDecision.DISCARD

            start, end = self._span(transcript)
            if self._last_toggle is not None and start - self._last_toggle < self._debounce:
                logger.info(
                    "Wake phrase '%s' ignored (%.2fs since last toggle)",
                    match.heard,
                    start - self._last_toggle,
                )
                return GateDecision.DEBOUNCED

            self._last_toggle = end
            if self._state is WakeState.ASLEEP:
                self._state = WakeState.ACTIVE
                decision = GateDecision.WOKE
            else:
                self._state = WakeState.ASLEEP
                decision = GateDecision.SLEPT

        logger.info(
            "Wake phrase '%s' ~ '%s' (score=%.1f) -> %s",
            match.heard,
            match.variant,
            match.score,
            decision.value,
        )
        return decision

    def _span(self, transcript: Transcript) -> tuple[float, float]:
        """Stream start/end of *transcript*, or the clock when it has none."""
        if transcript.start_time > 0 or transcript.end_time > 0:
            return transcript.start_time, max(transcript.start_time, transcript.end_time)
        now = self._clock()
        return now, now
