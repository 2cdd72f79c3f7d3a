"""Pydantic models for captured audio."""

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class AudioFrame(BaseModel):
    """A fixed-size block of mono int16 samples from the capture callback."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    samples: np.ndarray
    sample_rate: int = Field(gt=0)
    sequence: int = Field(ge=0)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    @property
    def start_time(self) -> float:
        """Stream time (seconds) at which this frame begins."""
        return self.sequence * self.duration

    @property
    def end_time(self) -> float:
        return (self.sequence + 1) * self.duration


class Utterance(BaseModel):
    """A contiguous span of detected speech, handed from segmenter to gate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    samples: np.ndarray
    sample_rate: int = Field(gt=0)
    start_time: float
    end_time: float
    frame_count: int = Field(gt=0)
    first_sequence: int = Field(ge=0)
    last_sequence: int = Field(ge=0)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate
