"""Enums for the wake-phrase gate."""

from enum import Enum


class WakeState(str, Enum):
    """Whether utterances are processed as commands or only scanned."""

    ASLEEP = "asleep"
    ACTIVE = "active"


class GateDecision(str, Enum):
    """What the gate did with one transcript."""

    WOKE = "woke"            # asleep -> active, utterance suppressed
    SLEPT = "slept"          # active -> asleep, utterance suppressed
    FORWARD = "forward"      # active, no wake phrase: process as command
    DISCARD = "discard"      # asleep, no wake phrase
    DEBOUNCED = "debounced"  # wake phrase inside the debounce window, ignored
