"""Pydantic frozen configuration models for coin_counter."""

from typing import Literal

from pydantic import BaseModel, Field


class PipelineConfig(BaseModel, frozen=True):
    """Configuration for the model, labels and input geometry.

    All fields are validated at construction time. Frozen — no mutation after creation.
    """

    model_path: str | None = None
    labels_path: str
    input_name: str = "data"
    input_width: int = Field(default=512, gt=0)
    input_height: int = Field(default=512, gt=0)
    resample: Literal["bilinear", "nearest"] = "bilinear"
    providers: list[str] = ["CPUExecutionProvider"]

    @property
    def input_shape(self) -> tuple[int, int, int, int]:
        """Fixed model input shape (batch, channels, height, width)."""
        return (1, 3, self.input_height, self.input_width)


class CaptureLoopConfig(BaseModel, frozen=True):
    """Configuration for the periodic capture loop."""

    interval_ms: int = Field(default=1000, gt=0)
    max_ticks: int | None = Field(default=None, ge=1)
    journal_path: str | None = None

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0
