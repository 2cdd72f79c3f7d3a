"""Bounded hand-off between the capture callback and the processing loop."""

import logging
import threading
from collections import deque

from voxaurora.audio.types import AudioFrame

logger = logging.getLogger(__name__)


class FrameQueue:
    """Drop-oldest frame buffer shared by the audio thread and the engine.

    ``push`` runs inside the sounddevice callback and never blocks beyond a
    short lock acquisition: when the queue is full the oldest unread frame
    is discarded and ``dropped`` is incremented.  ``pop_batch`` is called
    from the processing side (usually via ``asyncio.to_thread``) and waits
    until frames arrive, the timeout elapses, or the queue is closed.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._frames: deque[AudioFrame] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._dropped: int = 0
        self._closed: bool = False

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def push(self, frame: AudioFrame) -> None:
        """Append *frame*, evicting the oldest frame if at capacity."""
        with self._cond:
            if self._closed:
                return
            if len(self._frames) >= self._capacity:
                self._frames.popleft()
                self._dropped += 1
            self._frames.append(frame)
            self._cond.notify()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def pop_batch(self, timeout: float | None = None) -> list[AudioFrame]:
        """Return all pending frames, waiting for at least one.

        Returns an empty list on timeout, and always once the queue has
        been closed (pending frames are abandoned).
        """
        with self._cond:
            self._cond.wait_for(
                lambda: self._closed or bool(self._frames), timeout=timeout
            )
            if self._closed:
                return []
            batch = list(self._frames)
            self._frames.clear()
            return batch

    def close(self) -> None:
        """Signal shutdown: wake any waiter and refuse further frames."""
        with self._cond:
            self._closed = True
            abandoned = len(self._frames)
            self._frames.clear()
            self._cond.notify_all()
        if abandoned:
            logger.debug("Frame queue closed with %d unread frames", abandoned)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dropped(self) -> int:
        """Number of frames discarded because the queue was full."""
        with self._cond:
            return self._dropped

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._frames)
