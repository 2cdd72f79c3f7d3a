"""Sentence-embedding providers.

All providers return one float32 row per input string.  The engine calls
``encode`` once per transcript; trigger embeddings are computed once at
load time.
"""

import logging
import threading
from abc import ABC, abstractmethod

import numpy as np

from voxaurora.config import EMBEDDING_MODEL
from voxaurora.errors import ModelLoadError

logger = logging.getLogger(__name__)


class Embedder(ABC):
    """Abstract base class for embedding providers."""

    @abstractmethod
    def encode(self, texts: list[str]) -> np.ndarray:
        """Return a ``(len(texts), dim)`` float32 array.  May raise."""


class SentenceEmbedder(Embedder):
    """sentence-transformers model (all-MiniLM-L6-v2 by default)."""

    def __init__(self, model_name: str = EMBEDDING_MODEL, device: str | None = None) -> None:
        self._model_name = model_name
        self._device = device
        self._model = None
        self._lock = threading.Lock()

    def load(self) -> None:
        """Load the model.  Raises ModelLoadError on failure."""
        try:
            from sentence_transformers import SentenceTransformer

            self._model = SentenceTransformer(self._model_name, device=self._device)
        except Exception as exc:
            raise ModelLoadError(
                f"Cannot load embedding model {self._model_name}: {exc}"
            ) from exc
        logger.info("Embedding model loaded: %s", self._model_name)

    @property
    def is_available(self) -> bool:
        return self._model is not None

    def encode(self, texts: list[str]) -> np.ndarray:
        if self._model is None:
            raise RuntimeError("Embedding model is not loaded")
        with self._lock:
            vectors = self._model.encode(
                texts, convert_to_numpy=True, show_progress_bar=False
            )
        return np.asarray(vectors, dtype=np.float32).reshape(len(texts), -1)
