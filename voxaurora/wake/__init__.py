"""Wake-phrase gating for VoxAurora."""

from voxaurora.wake.gate import WakeGate
from voxaurora.wake.phrases import WakeMatch, WakePhrases, normalize_phrase
from voxaurora.wake.types import GateDecision, WakeState

__all__ = [
    "GateDecision",
    "WakeGate",
    "WakeMatch",
    "WakePhrases",
    "WakeState",
    "normalize_phrase",
]
