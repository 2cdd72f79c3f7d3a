"""Transcript post-processing: cleanup, correction, then word merging.

Streaming ASR often splits one word in two ("data base").  The merge pass
joins an adjacent pair when the joined form is a dictionary word, unless the
two halves are both common words or one is common and the other is itself a
dictionary word.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import NamedTuple

from voxaurora.config import CORRECTION_TIMEOUT
from voxaurora.stt.transcriber import strip_special_tags
from voxaurora.text.corrector import LanguageToolCorrector
from voxaurora.text.dictionary import Dictionary

logger = logging.getLogger(__name__)

_MAX_WORD_LENGTH = 20
# Punctuation a recogniser may insert inside a split word ("aujourd' hui").
_JOINING_PUNCTUATION = frozenset("-'’")
_TOKEN_RE = re.compile(r"\S+")
_AFFIX_RE = re.compile(r"^(\W*)(.*?)(\W*)$", re.DOTALL)


class _Token(NamedTuple):
    start: int
    end: int
    lead: str
    core: str
    trail: str


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    for m in _TOKEN_RE.finditer(text):
        lead, core, trail = _AFFIX_RE.match(m.group()).groups()
        tokens.append(_Token(m.start(), m.end(), lead, core, trail))
    return tokens


def _is_reasonable_word(word: str) -> bool:
    """Letters with optional inner apostrophes/hyphens, at most 20 long."""
    if not word or len(word) > _MAX_WORD_LENGTH:
        return False
    letters = "".join(ch for ch in word if ch not in _JOINING_PUNCTUATION)
    return letters.isalpha()


def _merge_candidate(left: _Token, right: _Token, dictionary: Dictionary) -> str | None:
    """Return the merged core for a pair, or None if it should stay split."""
    if not _is_reasonable_word(left.core) or not _is_reasonable_word(right.core):
        return None
    joint = left.trail + right.lead
    if any(ch not in _JOINING_PUNCTUATION for ch in joint):
        return None
    left_common = dictionary.is_common(left.core)
    right_common = dictionary.is_common(right.core)
    if left_common and right_common:
        return None
    # "a new", "may be": a function word next to a real word stays split.
    if (left_common and right.core in dictionary) or (right_common and left.core in dictionary):
        return None

    candidates = [left.core + joint + right.core]
    if joint:
        candidates.append(left.core + right.core)
    for candidate in candidates:
        if _is_reasonable_word(candidate) and candidate in dictionary:
            return candidate
    return None


def merge_pass(text: str, dictionary: Dictionary) -> tuple[str, int]:
    """One left-to-right, non-overlapping merge pass.

    Returns the new text and the number of merges made.  A merged token is
    not considered again within the same pass.
    """
    tokens = _tokenize(text)
    if len(tokens) < 2:
        return text, 0

    pieces: list[str] = []
    last_end = 0
    merges = 0
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if i + 1 < len(tokens):
            nxt = tokens[i + 1]
            merged = _merge_candidate(token, nxt, dictionary)
            if merged is not None:
                logger.debug("Merging %r + %r -> %r", token.core, nxt.core, merged)
                pieces.append(text[last_end:token.start])
                pieces.append(token.lead + merged + nxt.trail)
                last_end = nxt.end
                merges += 1
                i += 2
                continue
        pieces.append(text[last_end:token.end])
        last_end = token.end
        i += 1

    pieces.append(text[last_end:])
    return "".join(pieces), merges


def merge_split_words(text: str, dictionary: Dictionary) -> str:
    """Repeat :func:`merge_pass` until nothing merges.

    Every merge removes a token, so this terminates; the result is a fixed
    point, which makes normalization idempotent.
    """
    if dictionary.is_empty:
        return text
    while True:
        text, merges = merge_pass(text, dictionary)
        if merges == 0:
            return text


class TranscriptNormalizer:
    """Cleanup + correction + merge, producing the text fed to the matcher."""

    def __init__(
        self,
        dictionary: Dictionary,
        corrector: LanguageToolCorrector | None = None,
        *,
        correction_timeout: float = CORRECTION_TIMEOUT,
    ) -> None:
        self._dictionary = dictionary
        self._corrector = corrector
        self._correction_timeout = correction_timeout

    async def start(self) -> None:
        if self._corrector is not None:
            await self._corrector.start()

    async def stop(self) -> None:
        if self._corrector is not None:
            await self._corrector.stop()

    @property
    def dictionary(self) -> Dictionary:
        return self._dictionary

    async def normalize(self, raw: str) -> str:
        text = strip_special_tags(raw)
        if not text:
            return text
        logger.info("Text before correction: %s", text)

        corrected = await self._correct(text)
        normalized = merge_split_words(corrected, self._dictionary)
        logger.info("Text after correction: %s", normalized)
        return normalized

    async def _correct(self, text: str) -> str:
        if self._corrector is None:
            return text
        try:
            corrected = await asyncio.wait_for(
                self._corrector.correct(text), timeout=self._correction_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Correction timed out — using raw text")
            return text
        except Exception:
            logger.warning("Correction failed — using raw text", exc_info=True)
            return text
        return strip_special_tags(corrected) or text
