"""Sample-rate and format adaptation for the speech-to-text engine."""

from fractions import Fraction

import numpy as np
from scipy import signal


def to_float32(samples: np.ndarray) -> np.ndarray:
    """Convert int16 PCM (any shape) to mono float32 in [-1.0, 1.0)."""
    data = np.asarray(samples)
    if data.dtype == np.int16:
        data = data.astype(np.float32) / 32768.0
    else:
        data = data.astype(np.float32, copy=False)
    if data.ndim > 1:
        data = data.mean(axis=1, dtype=np.float32)
    return data


def resample(samples: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Polyphase-resample mono audio from *src_rate* to *dst_rate*.

    Input may be int16 or float; output is always float32.
    """
    audio = to_float32(samples)
    if src_rate == dst_rate:
        return audio
    frac = Fraction(dst_rate, src_rate).limit_denominator(1000)
    return signal.resample_poly(audio, frac.numerator, frac.denominator).astype(
        np.float32, copy=False
    )
