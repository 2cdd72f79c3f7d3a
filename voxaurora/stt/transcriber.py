"""Local whisper.cpp speech-to-text via pywhispercpp.

The model is loaded once at startup (a failure is fatal).  ``transcribe`` is
blocking and is meant to be run through ``asyncio.to_thread`` with a
timeout by the engine; it returns None for silence or empty output.
"""

import logging
import re
import threading
from pathlib import Path

import numpy as np

from voxaurora.config import STT_LANGUAGE, STT_SAMPLE_RATE, STT_THREADS
from voxaurora.errors import ModelLoadError
from voxaurora.stt.types import Transcript

logger = logging.getLogger(__name__)

# Whisper emits markers such as [_BEG_], [_TT_42] or [BLANK_AUDIO].
_SPECIAL_TAG_RE = re.compile(r"\[[^\]]*\]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_special_tags(text: str) -> str:
    """Remove whisper special markers and collapse whitespace."""
    text = _SPECIAL_TAG_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


class WhisperTranscriber:
    """whisper.cpp model wrapper producing :class:`Transcript` objects."""

    def __init__(
        self,
        model_path: str,
        *,
        language: str = STT_LANGUAGE,
        n_threads: int = STT_THREADS,
    ) -> None:
        self._model_path = model_path
        self._language = language
        self._n_threads = n_threads
        self._model = None
        # whisper.cpp contexts are not re-entrant; a timed-out call may still
        # be running when the next utterance arrives.
        self._lock = threading.Lock()

    def load(self) -> None:
        """Load the ggml model.  Raises ModelLoadError on failure."""
        if not Path(self._model_path).is_file():
            raise ModelLoadError(f"Model file not found: {self._model_path}")
        try:
            from pywhispercpp.model import Model

            self._model = Model(
                self._model_path,
                n_threads=self._n_threads,
                language=self._language,
                print_progress=False,
                print_realtime=False,
                print_timestamps=False,
                print_special=False,
            )
        except Exception as exc:
            raise ModelLoadError(
                f"Cannot load whisper model {self._model_path}: {exc}"
            ) from exc
        logger.info(
            "Whisper model loaded from %s (language=%s)", self._model_path, self._language
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    def transcribe(
        self, audio: np.ndarray, start_time: float = 0.0, end_time: float = 0.0
    ) -> Transcript | None:
        """Transcribe 16 kHz mono float32 audio.

        Returns None when nothing intelligible was recognised.  Errors from
        the model propagate to the caller, which drops the utterance.
        """
        if self._model is None:
            raise RuntimeError("Whisper model is not loaded")

        with self._lock:
            segments = self._model.transcribe(audio)

        raw = " ".join(segment.text.strip() for segment in segments)
        text = strip_special_tags(raw)
        if not text:
            logger.debug("Whisper returned no text for %.2fs of audio", len(audio) / STT_SAMPLE_RATE)
            return None

        logger.debug("Whisper transcript: %s", text)
        return Transcript(text=text, start_time=start_time, end_time=end_time)
