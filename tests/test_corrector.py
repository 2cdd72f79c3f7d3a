"""Tests for voxaurora.text.corrector — LanguageTool client."""

import json
import time
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from voxaurora.text.corrector import LanguageToolCorrector, apply_replacements


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_health_response(status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        request=httpx.Request("GET", "/v2/languages"),
    )


def _mock_check_response(matches: list[dict]) -> httpx.Response:
    return httpx.Response(
        status_code=200,
        content=json.dumps({"matches": matches}).encode(),
        headers={"content-type": "application/json"},
        request=httpx.Request("POST", "/v2/check"),
    )


def _match(offset: int, length: int, *values: str) -> dict:
    return {
        "offset": offset,
        "length": length,
        "replacements": [{"value": v} for v in values],
    }


async def _started(health: httpx.Response | Exception) -> tuple[LanguageToolCorrector, AsyncMock]:
    with patch("voxaurora.text.corrector.httpx.AsyncClient") as MockClient:
        instance = AsyncMock()
        if isinstance(health, Exception):
            instance.get = AsyncMock(side_effect=health)
        else:
            instance.get = AsyncMock(return_value=health)
        MockClient.return_value = instance

        corrector = LanguageToolCorrector(base_url="http://lt.test", language="en-US")
        await corrector.start()
    return corrector, instance


# ---------------------------------------------------------------------------
# apply_replacements
# ---------------------------------------------------------------------------


class TestApplyReplacements:
    def test_single_replacement(self):
        assert apply_replacements("wright hello world", [_match(0, 6, "write")]) == (
            "write hello world"
        )

    def test_first_suggestion_wins(self):
        assert apply_replacements("teh cat", [_match(0, 3, "the", "tea")]) == "the cat"

    def test_multiple_matches_keep_offsets_valid(self):
        text = "i has a apple"
        matches = [_match(0, 1, "I"), _match(2, 3, "have"), _match(6, 1, "an")]
        assert apply_replacements(text, matches) == "I have an apple"

    def test_match_without_replacements_skipped(self):
        assert apply_replacements("hello", [{"offset": 0, "length": 5, "replacements": []}]) == "hello"

    def test_out_of_range_match_skipped(self):
        assert apply_replacements("hi", [_match(1, 10, "x")]) == "hi"

    def test_overlapping_match_skipped(self):
        matches = [_match(0, 5, "A"), _match(3, 4, "B")]
        assert apply_replacements("abcdefgh", matches) == "abcBh"

    def test_no_matches(self):
        assert apply_replacements("fine text", []) == "fine text"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_health_check_success(self):
        corrector, _ = await _started(_mock_health_response(200))
        assert corrector.is_available is True

    async def test_health_check_bad_status(self):
        corrector, _ = await _started(_mock_health_response(503))
        assert corrector.is_available is False

    async def test_health_check_connection_error(self):
        corrector, _ = await _started(httpx.ConnectError("Connection refused"))
        assert corrector.is_available is False

    async def test_stop_closes_client(self):
        corrector, instance = await _started(_mock_health_response(200))
        await corrector.stop()

        instance.aclose.assert_awaited_once()
        assert corrector.is_available is False
        assert corrector._client is None


# ---------------------------------------------------------------------------
# correct()
# ---------------------------------------------------------------------------


class TestCorrect:
    async def test_applies_server_suggestions(self):
        corrector, instance = await _started(_mock_health_response(200))
        instance.post = AsyncMock(return_value=_mock_check_response([_match(0, 6, "write")]))

        result = await corrector.correct("wright hello world")

        assert result == "write hello world"
        args, kwargs = instance.post.call_args
        assert args[0] == "/v2/check"
        assert kwargs["data"] == {"text": "wright hello world", "language": "en-US"}

    async def test_unavailable_returns_input(self):
        corrector, instance = await _started(_mock_health_response(503))
        instance.post = AsyncMock()

        assert await corrector.correct("wright hello") == "wright hello"
        instance.post.assert_not_called()

    async def test_request_error_returns_input(self):
        corrector, instance = await _started(_mock_health_response(200))
        instance.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        assert await corrector.correct("wright hello") == "wright hello"

    async def test_server_error_returns_input(self):
        corrector, instance = await _started(_mock_health_response(200))
        instance.post = AsyncMock(
            return_value=httpx.Response(500, request=httpx.Request("POST", "/v2/check"))
        )

        assert await corrector.correct("wright hello") == "wright hello"

    async def test_blank_text_not_sent(self):
        corrector, instance = await _started(_mock_health_response(200))
        instance.post = AsyncMock()

        assert await corrector.correct("   ") == "   "
        instance.post.assert_not_called()

    async def test_rechecks_health_after_interval(self, monkeypatch):
        corrector, instance = await _started(_mock_health_response(503))
        assert corrector.is_available is False

        instance.get = AsyncMock(return_value=_mock_health_response(200))
        instance.post = AsyncMock(return_value=_mock_check_response([]))
        monkeypatch.setattr("voxaurora.text.corrector.CORRECTION_HEALTH_CHECK_INTERVAL", 0.0)
        corrector._last_health_check = time.monotonic() - 1

        assert await corrector.correct("hello") == "hello"
        assert corrector.is_available is True
        instance.post.assert_awaited_once()
