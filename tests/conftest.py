"""Shared fixtures for VoxAurora tests."""

import numpy as np
import pytest

from voxaurora.audio.types import AudioFrame
from voxaurora.commands.embeddings import Embedder
from voxaurora.text.dictionary import Dictionary

_VOCAB = (
    "open", "terminal", "browser", "close", "window", "hello",
    "world", "write", "please", "firefox", "the",
)


class KeywordEmbedder(Embedder):
    """Bag-of-words embedder over a tiny fixed vocabulary.

    Words outside the vocabulary are ignored, so a transcript with no known
    words embeds to the zero vector and matches nothing.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def encode(self, texts: list[str]) -> np.ndarray:
        self.calls.append(list(texts))
        rows = np.zeros((len(texts), len(_VOCAB)), dtype=np.float32)
        for row, text in enumerate(texts):
            for word in text.lower().split():
                word = word.strip(".,!?")
                if word in _VOCAB:
                    rows[row, _VOCAB.index(word)] += 1.0
        return rows


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_frame(
    sequence: int,
    amplitude: int = 0,
    n_samples: int = 480,
    sample_rate: int = 16000,
) -> AudioFrame:
    """Frame of constant *amplitude* (0 = silence)."""
    samples = np.full(n_samples, amplitude, dtype=np.int16)
    return AudioFrame(samples=samples, sample_rate=sample_rate, sequence=sequence)


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dictionary() -> Dictionary:
    """Small dictionary holding the merge targets used across tests."""
    return Dictionary(
        [
            "database", "notebook", "into", "today", "aujourd'hui",
            "abc", "abcdef", "hello", "world", "write", "open", "terminal",
        ]
    )
