from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Pipeline stages in the order they are entered."""

    PREPARING = "preparing"
    UPLOADING = "uploading"
    WAITING = "waiting"
    CONVERTING = "converting"
    RATE_LIMITED = "rate_limited"

    @property
    def order(self) -> int:
        return list(Stage).index(self)


STAGE_MESSAGES: dict[Stage, str] = {
    Stage.PREPARING: "Preparing image...",
    Stage.UPLOADING: "Uploading image...",
    Stage.WAITING: "Waiting for image to be available...",
    Stage.CONVERTING: "Converting image...",
    Stage.RATE_LIMITED: "Rate limit hit. Waiting {seconds:g}s...",
}


class ProgressEvent(BaseModel):
    stage: Stage
    message: str


class ConversionResult(BaseModel):
    source_url: str
    output_urls: list[str] = Field(..., min_length=1)

    @property
    def url(self) -> str:
        return self.output_urls[0]


class ConversionState(BaseModel):
    """Per-request view of a conversion, handed to listeners on every transition.

    Exactly one of ``result`` / ``error`` is set once ``converting`` turns
    back to ``False``.
    """

    converting: bool = False
    stage: Stage | None = None
    progress: str | None = None
    events: list[ProgressEvent] = []
    error: str | None = None
    error_kind: str | None = None
    result: ConversionResult | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None
