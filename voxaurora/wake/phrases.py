"""Accepted wake-phrase variants and the single fuzzy matcher over them."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Iterator, NamedTuple

from rapidfuzz import fuzz

_NON_WORD_RE = re.compile(r"[^\w\s]+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_phrase(text: str) -> str:
    """Lowercase, turn punctuation/hyphens into spaces, collapse whitespace."""
    text = unicodedata.normalize("NFKC", text).lower().replace("-", " ")
    text = _NON_WORD_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


class WakeMatch(NamedTuple):
    variant: str
    heard: str
    score: float


class WakePhrases:
    """Immutable set of wake-phrase variants.

    A transcript matches when any run of consecutive words, as long as a
    variant, scores at or above ``threshold`` (rapidfuzz ratio, 0-100)
    against that variant.  Matching word windows rather than the whole
    transcript lets "aurora, open the terminal" count as a wake utterance.
    """

    def __init__(self, variants: Iterable[str], threshold: float = 80.0) -> None:
        normalized = []
        for variant in variants:
            phrase = normalize_phrase(variant)
            if phrase and phrase not in normalized:
                normalized.append(phrase)
        if not normalized:
            raise ValueError("at least one wake phrase is required")
        self._variants: tuple[str, ...] = tuple(normalized)
        self._threshold = threshold

    def __iter__(self) -> Iterator[str]:
        return iter(self._variants)

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, phrase: object) -> bool:
        return isinstance(phrase, str) and normalize_phrase(phrase) in self._variants

    @property
    def threshold(self) -> float:
        return self._threshold

    def match(self, transcript: str) -> WakeMatch | None:
        """Return the best-scoring variant match at or above threshold."""
        words = normalize_phrase(transcript).split()
        if not words:
            return None

        best: WakeMatch | None = None
        for variant in self._variants:
            size = len(variant.split())
            for start in range(max(1, len(words) - size + 1)):
                heard = " ".join(words[start:start + size])
                score = fuzz.ratio(heard, variant)
                if score >= self._threshold and (best is None or score > best.score):
                    best = WakeMatch(variant=variant, heard=heard, score=score)
        return best
