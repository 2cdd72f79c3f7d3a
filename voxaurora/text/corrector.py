"""LanguageTool HTTP client with health checking and graceful degradation.

Sends transcript text to a LanguageTool server's ``/v2/check`` endpoint and
applies the first suggested replacement of every match.  Any failure
returns the input unchanged, so correction can never drop an utterance.
"""

import logging
import time

import httpx

from voxaurora.config import (
    CORRECTION_HEALTH_CHECK_INTERVAL,
    CORRECTION_TIMEOUT,
    LANGUAGETOOL_LANGUAGE,
    LANGUAGETOOL_URL,
)

logger = logging.getLogger(__name__)


def apply_replacements(text: str, matches: list[dict]) -> str:
    """Apply the first replacement of each LanguageTool match to *text*.

    Matches are applied from the highest offset down so earlier offsets
    stay valid; overlapping matches after the first applied are skipped.
    """
    corrected = text
    limit = len(text) + 1
    for match in sorted(matches, key=lambda m: m.get("offset", 0), reverse=True):
        replacements = match.get("replacements") or []
        if not replacements:
            continue
        offset = int(match.get("offset", 0))
        length = int(match.get("length", 0))
        end = offset + length
        if offset < 0 or end > len(text) or end > limit:
            continue
        corrected = corrected[:offset] + replacements[0].get("value", "") + corrected[end:]
        limit = offset
    return corrected


class LanguageToolCorrector:
    """Grammar/spelling corrector backed by a LanguageTool server."""

    def __init__(
        self,
        base_url: str = LANGUAGETOOL_URL,
        language: str = LANGUAGETOOL_LANGUAGE,
        timeout: float = CORRECTION_TIMEOUT,
    ) -> None:
        self._base_url = base_url
        self._language = language
        self._timeout = timeout
        self._available: bool = False
        self._last_health_check: float = 0.0
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize the HTTP client and run initial health check."""
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        await self._check_health()

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._available = False

    @property
    def is_available(self) -> bool:
        """Whether the LanguageTool server is currently reachable."""
        return self._available

    async def correct(self, text: str) -> str:
        """Return the corrected *text*, or *text* itself on any failure."""
        if not text.strip():
            return text

        await self._maybe_recheck_health()
        if not self._available or not self._client:
            return text

        try:
            response = await self._client.post(
                "/v2/check", data={"text": text, "language": self._language}
            )
            response.raise_for_status()
            matches = response.json().get("matches", [])
        except Exception:
            logger.warning("LanguageTool correction failed — using raw text", exc_info=True)
            return text

        corrected = apply_replacements(text, matches)
        if corrected != text:
            logger.debug("Corrected %r -> %r", text, corrected)
        return corrected

    async def _check_health(self) -> None:
        """Probe GET /v2/languages."""
        self._last_health_check = time.monotonic()
        if not self._client:
            self._available = False
            return
        try:
            resp = await self._client.get("/v2/languages")
            self._available = resp.status_code == 200
            if self._available:
                logger.info(
                    "LanguageTool available at %s (language: %s)",
                    self._base_url,
                    self._language,
                )
            else:
                logger.warning(
                    "LanguageTool returned status %d — correction disabled",
                    resp.status_code,
                )
        except (httpx.ConnectError, httpx.TimeoutException, OSError) as exc:
            self._available = False
            logger.warning(
                "LanguageTool not available at %s — correction disabled: %s",
                self._base_url,
                exc,
            )

    async def _maybe_recheck_health(self) -> None:
        """Re-check LanguageTool availability if enough time has passed."""
        if not self._available:
            elapsed = time.monotonic() - self._last_health_check
            if elapsed >= CORRECTION_HEALTH_CHECK_INTERVAL:
                await self._check_health()
