"""Pydantic models for the STT subsystem."""

from pydantic import BaseModel, ConfigDict


class Transcript(BaseModel):
    """Raw text recognised from one utterance."""

    model_config = ConfigDict(frozen=True)

    text: str
    confidence: float | None = None
    start_time: float = 0.0
    end_time: float = 0.0
