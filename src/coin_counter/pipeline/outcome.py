"""Per-tick outcome types.

A tick never raises; it returns one of these tagged models instead.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from coin_counter.aggregation.schemas import ClassificationResult

Stage = Literal["capture", "decode", "preprocess", "infer", "labels", "aggregate"]


class TickSuccess(BaseModel, frozen=True):
    status: Literal["success"] = "success"
    result: ClassificationResult


class TickFailure(BaseModel, frozen=True):
    """A tick that raised; the published result is left as it was."""

    status: Literal["failure"] = "failure"
    stage: Stage | Literal["unexpected"]
    error_type: str
    message: str

    @classmethod
    def from_exception(
        cls, stage: Stage | Literal["unexpected"], exc: BaseException
    ) -> TickFailure:
        return cls(stage=stage, error_type=type(exc).__name__, message=str(exc))


class TickSkipped(BaseModel, frozen=True):
    """A tick gated off before any capture or inference took place."""

    status: Literal["skipped"] = "skipped"
    reason: str


TickOutcome = TickSuccess | TickFailure | TickSkipped
