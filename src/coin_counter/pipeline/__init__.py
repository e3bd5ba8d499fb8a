"""Capture-to-result pipeline: context, outcome types and runner."""

from coin_counter.pipeline.context import PipelineContext
from coin_counter.pipeline.outcome import (
    TickFailure,
    TickOutcome,
    TickSkipped,
    TickSuccess,
)
from coin_counter.pipeline.runner import run_pipeline

__all__ = [
    "PipelineContext",
    "TickFailure",
    "TickOutcome",
    "TickSkipped",
    "TickSuccess",
    "run_pipeline",
]
