"""Semantic matching of a normalized transcript against the CommandSet.

The transcript is embedded once and compared against a pre-normalized
matrix of trigger embeddings, so each match costs one embedding call plus
one matrix-vector product.
"""

import logging

import numpy as np

from voxaurora.commands.embeddings import Embedder
from voxaurora.commands.types import CommandSet, MatchResult
from voxaurora.config import MATCH_THRESHOLD, MATCH_TIE_TOLERANCE

logger = logging.getLogger(__name__)


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return matrix / norms


class CommandMatcher:
    """Selects the most similar command above ``threshold``.

    Ties within ``tie_tolerance`` go to the earliest-loaded command.
    """

    def __init__(
        self,
        commands: CommandSet,
        embedder: Embedder,
        *,
        threshold: float = MATCH_THRESHOLD,
        tie_tolerance: float = MATCH_TIE_TOLERANCE,
    ) -> None:
        self._commands = commands
        self._embedder = embedder
        self._threshold = threshold
        self._tie_tolerance = tie_tolerance
        if len(commands):
            matrix = np.stack([c.embedding for c in commands.commands]).astype(np.float32)
            self._matrix = _unit_rows(matrix)
        else:
            self._matrix = np.zeros((0, 0), dtype=np.float32)
        self._matrix.flags.writeable = False

    @property
    def commands(self) -> CommandSet:
        return self._commands

    @property
    def threshold(self) -> float:
        return self._threshold

    def similarities(self, vector: np.ndarray) -> np.ndarray:
        """Cosine similarity of *vector* against every command, in load order."""
        if not len(self._commands):
            return np.zeros(0, dtype=np.float32)
        norm = float(np.linalg.norm(vector))
        if norm == 0.0:
            return np.zeros(len(self._commands), dtype=np.float32)
        return self._matrix @ (vector.astype(np.float32) / norm)

    def match(self, text: str) -> MatchResult:
        """Embed *text* once and return the best command or no match.

        Blocking; the embedding call may raise and is run by the engine in a
        worker thread with a timeout.
        """
        if not len(self._commands) or not text.strip():
            return MatchResult(command=None, similarity=0.0, text=text)

        vector = np.asarray(self._embedder.encode([text]), dtype=np.float32)[0]
        scores = self.similarities(vector)

        best_index = 0
        best_score = float(scores[0])
        for index in range(1, len(scores)):
            score = float(scores[index])
            if score > best_score + self._tie_tolerance:
                best_index, best_score = index, score

        best = self._commands.commands[best_index]
        for command, score in zip(self._commands.commands, scores):
            logger.debug("  '%s': similarity = %.3f", command.trigger, score)

        if best_score < self._threshold:
            logger.info(
                "No command for '%s' (best '%s' = %.3f < %.3f)",
                text,
                best.trigger,
                best_score,
                self._threshold,
            )
            return MatchResult(command=None, similarity=best_score, text=text)

        logger.info("Matched '%s' -> '%s' (similarity = %.3f)", text, best.trigger, best_score)
        return MatchResult(command=best, similarity=best_score, text=text)
