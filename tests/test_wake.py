"""Tests for voxaurora.wake — wake phrases and the WakeGate state machine."""

import threading

import pytest

from voxaurora.config import WAKE_PHRASES
from voxaurora.stt.types import Transcript
from voxaurora.wake.gate import WakeGate
from voxaurora.wake.phrases import WakePhrases, normalize_phrase
from voxaurora.wake.types import GateDecision, WakeState


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _t(text: str) -> Transcript:
    return Transcript(text=text)


@pytest.fixture
def phrases() -> WakePhrases:
    return WakePhrases(WAKE_PHRASES, threshold=80.0)


@pytest.fixture
def gate(phrases, clock) -> WakeGate:
    return WakeGate(phrases, debounce_seconds=1.5, clock=clock)


# ---------------------------------------------------------------------------
# WakePhrases
# ---------------------------------------------------------------------------


class TestWakePhrases:
    def test_normalize_phrase(self):
        assert normalize_phrase("  Vox-Oroha! ") == "vox oroha"

    def test_variants_are_normalized_and_deduplicated(self, phrases):
        assert "vox oroha" in phrases
        assert "Vox-Oroha" in phrases
        # "vox-oroha" and "vox oroha" collapse to one entry.
        assert len(phrases) == len(WAKE_PHRASES) - 1

    def test_empty_variant_list_rejected(self):
        with pytest.raises(ValueError):
            WakePhrases(["", "  "])

    def test_exact_variant_matches(self, phrases):
        match = phrases.match("aurora")
        assert match is not None
        assert match.score == 100.0

    def test_variant_inside_sentence_matches(self, phrases):
        match = phrases.match("Hey, Aurora! open the terminal")
        assert match is not None
        assert match.heard == "aurora"

    def test_multi_word_variant_matches(self, phrases):
        match = phrases.match("vox au rohe")
        assert match is not None
        assert match.variant == "vox au rohe"

    def test_close_mishearing_matches(self, phrases):
        assert phrases.match("arorah") is not None

    @pytest.mark.parametrize(
        "text", ["open the terminal please", "write hello world", "", "..."]
    )
    def test_ordinary_speech_does_not_match(self, phrases, text):
        assert phrases.match(text) is None


# ---------------------------------------------------------------------------
# WakeGate
# ---------------------------------------------------------------------------


class TestWakeGate:
    def test_starts_asleep(self, gate):
        assert gate.state is WakeState.ASLEEP
        assert gate.is_active is False

    def test_asleep_discards_speech(self, gate):
        assert gate.process(_t("open the terminal")) is GateDecision.DISCARD
        assert gate.state is WakeState.ASLEEP

    def test_wake_phrase_activates(self, gate):
        assert gate.process(_t("aurora")) is GateDecision.WOKE
        assert gate.state is WakeState.ACTIVE

    def test_active_forwards_speech(self, gate, clock):
        gate.process(_t("aurora"))
        clock.advance(5)
        assert gate.process(_t("open the terminal")) is GateDecision.FORWARD

    def test_wake_phrase_while_active_sleeps(self, gate, clock):
        gate.process(_t("aurora"))
        clock.advance(2.0)
        assert gate.process(_t("aurora")) is GateDecision.SLEPT
        assert gate.state is WakeState.ASLEEP

    def test_repeat_within_debounce_is_ignored(self, gate, clock):
        gate.process(_t("aurora"))
        clock.advance(0.5)
        assert gate.process(_t("aurora")) is GateDecision.DEBOUNCED
        assert gate.state is WakeState.ACTIVE

    def test_toggle_allowed_again_after_debounce(self, gate, clock):
        gate.process(_t("aurora"))
        clock.advance(0.5)
        gate.process(_t("aurora"))
        clock.advance(1.5)
        assert gate.process(_t("aurora")) is GateDecision.SLEPT

    def test_debounce_uses_stream_time_not_processing_time(self, gate, clock):
        first = Transcript(text="aurora", start_time=10.0, end_time=10.6)
        repeat = Transcript(text="aurora", start_time=10.9, end_time=11.5)

        assert gate.process(first) is GateDecision.WOKE
        clock.advance(2.0)  # slow transcription
        assert gate.process(repeat) is GateDecision.DEBOUNCED
        assert gate.state is WakeState.ACTIVE

    def test_debounce_measured_from_end_of_toggling_utterance(self, gate, clock):
        gate.process(Transcript(text="aurora", start_time=10.0, end_time=10.6))

        later = Transcript(text="aurora", start_time=12.2, end_time=12.8)
        assert gate.process(later) is GateDecision.SLEPT

    def test_start_time_only_transcripts_debounce(self, gate, clock):
        gate.process(Transcript(text="aurora", start_time=10.0))
        clock.advance(2.0)
        assert gate.process(Transcript(text="aurora", start_time=10.9)) is GateDecision.DEBOUNCED

    def test_initial_state_active(self, phrases, clock):
        gate = WakeGate(phrases, initial_state=WakeState.ACTIVE, clock=clock)
        assert gate.process(_t("hello")) is GateDecision.FORWARD

    def test_concurrent_toggles_flip_once(self, phrases):
        gate = WakeGate(phrases, debounce_seconds=60.0)
        decisions = []
        lock = threading.Lock()

        def worker():
            decision = gate.process(_t("aurora"))
            with lock:
                decisions.append(decision)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert decisions.count(GateDecision.WOKE) == 1
        assert decisions.count(GateDecision.DEBOUNCED) == 7
        assert gate.state is WakeState.ACTIVE
