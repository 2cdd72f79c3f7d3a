"""Word dictionary backed by an Aho-Corasick automaton.

Word lists come from LibreOffice hunspell ``.dic`` files, downloaded once
and cached on disk.  The dictionary is built at startup and read-only
afterwards.
"""

from __future__ import annotations

import logging
import unicodedata
from pathlib import Path
from typing import Iterable

import ahocorasick
import httpx

from voxaurora.config import (
    COMMON_WORDS_FILE,
    DICTIONARY_CACHE_DIR,
    DICTIONARY_DOWNLOAD_TIMEOUT,
    DICTIONARY_LANGUAGES,
    DICTIONARY_URLS,
)

logger = logging.getLogger(__name__)

# Function words that are almost always meant as separate words.  A pair
# made of two of these ("in to", "a part") is never merged.
DEFAULT_COMMON_WORDS: frozenset[str] = frozenset(
    {
        # en
        "a", "an", "the", "and", "or", "but", "if", "of", "to", "in", "on",
        "at", "by", "for", "with", "from", "as", "is", "are", "was", "be",
        "it", "its", "this", "that", "i", "you", "he", "she", "we", "they",
        "me", "my", "your", "our", "no", "not", "so", "up", "out", "do",
        "go", "can", "will", "all", "any", "some", "there", "here", "what",
        # fr
        "le", "la", "les", "un", "une", "des", "de", "du", "et", "ou", "en",
        "au", "aux", "je", "tu", "il", "elle", "on", "nous", "vous", "ils",
        "ce", "se", "sa", "son", "ses", "que", "qui", "ne", "pas", "par",
        "pour", "sur", "dans", "avec", "est",
    }
)


def normalize_word(word: str) -> str:
    """NFKC-normalize and lowercase a word for lookup."""
    return unicodedata.normalize("NFKC", word).lower()


def parse_hunspell_dic(content: str) -> list[str]:
    """Extract unique lowercase words from a hunspell ``.dic`` file.

    The first line holds the entry count; every other line is
    ``word[/AFFIX_FLAGS]``.
    """
    seen: set[str] = set()
    words: list[str] = []
    for line in content.splitlines()[1:]:
        word = normalize_word(line.split("/", 1)[0].strip())
        if word and word not in seen:
            seen.add(word)
            words.append(word)
    return words


class Dictionary:
    """Known-word set with exact and prefix lookup."""

    def __init__(
        self,
        words: Iterable[str],
        common_words: Iterable[str] = DEFAULT_COMMON_WORDS,
    ) -> None:
        self._automaton = ahocorasick.Automaton()
        for word in words:
            key = normalize_word(word)
            if key and not self._automaton.exists(key):
                self._automaton.add_word(key, len(self._automaton))
        self._automaton.make_automaton()
        self._common: frozenset[str] = frozenset(normalize_word(w) for w in common_words)

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str) or not word:
            return False
        return self._automaton.exists(normalize_word(word))

    def __len__(self) -> int:
        return len(self._automaton)

    def has_prefix(self, prefix: str) -> bool:
        """Whether any known word starts with *prefix*."""
        if not prefix:
            return len(self) > 0
        return self._automaton.match(normalize_word(prefix))

    def is_common(self, word: str) -> bool:
        """Whether *word* is a common stand-alone word."""
        return normalize_word(word) in self._common

    @property
    def is_empty(self) -> bool:
        return len(self) == 0


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_or_download(lang: str, url: str, cache_dir: Path) -> str | None:
    path = cache_dir / f"{lang}.dic"
    if path.exists():
        logger.info("Using cached dictionary for %s (%s)", lang, path)
        return path.read_text(encoding="utf-8", errors="replace")

    logger.info("Downloading dictionary for %s from %s", lang, url)
    try:
        response = httpx.get(url, timeout=DICTIONARY_DOWNLOAD_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, OSError):
        logger.warning("Dictionary download failed for %s", lang, exc_info=True)
        return None

    content = response.text
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError:
        logger.warning("Could not cache dictionary at %s", path, exc_info=True)
    return content


def _read_common_words(path: str) -> set[str]:
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError:
        logger.warning("Could not read common words file %s", path, exc_info=True)
        return set()
    return {line.strip() for line in lines if line.strip() and not line.startswith("#")}


def load_dictionary(
    languages: Iterable[str] = DICTIONARY_LANGUAGES,
    *,
    cache_dir: Path = DICTIONARY_CACHE_DIR,
    urls: dict[str, str] = DICTIONARY_URLS,
    common_words_file: str = COMMON_WORDS_FILE,
) -> Dictionary:
    """Build the merged dictionary for *languages*.

    A language that cannot be downloaded is skipped with a warning; if all
    fail the result is empty and the merge pass becomes a no-op.
    """
    words: list[str] = []
    for lang in languages:
        url = urls.get(lang)
        if url is None:
            logger.warning("No dictionary URL configured for language %r", lang)
            continue
        content = _read_or_download(lang, url, cache_dir)
        if content is None:
            continue
        parsed = parse_hunspell_dic(content)
        logger.info("%d words extracted for language %s", len(parsed), lang)
        words.extend(parsed)

    common = set(DEFAULT_COMMON_WORDS)
    if common_words_file:
        common |= _read_common_words(common_words_file)

    dictionary = Dictionary(words, common)
    if dictionary.is_empty:
        logger.warning("Dictionary is empty — word merging disabled")
    else:
        logger.info("Dictionary built with %d words", len(dictionary))
    return dictionary
