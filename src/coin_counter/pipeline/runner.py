"""Run one frame through decode, preprocess, infer and aggregate."""

from __future__ import annotations

from loguru import logger

from coin_counter.aggregation import aggregate
from coin_counter.errors import CoinCounterError, ModelNotLoadedError
from coin_counter.imaging import decode_image
from coin_counter.pipeline.context import PipelineContext
from coin_counter.pipeline.outcome import Stage, TickFailure, TickOutcome, TickSuccess


def run_pipeline(frame: bytes, context: PipelineContext) -> TickOutcome:
    """Process one encoded frame.

    Pipeline errors are returned as a ``TickFailure`` tagged with the stage
    that raised; they never propagate.
    """
    stage: Stage = "decode"
    try:
        grid = decode_image(frame)

        stage = "preprocess"
        tensor = context.preprocessor(grid)

        stage = "infer"
        if context.inferencer is None:
            raise ModelNotLoadedError("No model attached to the pipeline")
        output = context.inferencer.run(tensor)

        stage = "labels"
        labels = context.labels.get()

        stage = "aggregate"
        result = aggregate(output, labels, context.value_map)
    except CoinCounterError as exc:
        logger.warning(f"Pipeline failed at {stage}: {type(exc).__name__}: {exc}")
        return TickFailure.from_exception(stage, exc)

    logger.debug(f"Pipeline result: {result.lines()}")
    return TickSuccess(result=result)
