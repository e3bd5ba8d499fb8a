"""Owned pipeline resources: model handle, label store, value map."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType

from loguru import logger

from coin_counter.aggregation import COIN_VALUES
from coin_counter.config import PipelineConfig
from coin_counter.errors import InferenceError, ShapeMismatchError
from coin_counter.imaging import FramePreprocessor
from coin_counter.inference import BaseCountInferencer, LabelStore, ONNXCountInferencer


class PipelineContext:
    """Long-lived resources shared by every tick.

    Created once and released once.  Only the capture loop's execution
    context calls into it, so nothing here is mutated concurrently.

    Args:
        preprocessor: Frame-to-tensor conversion bound to the model input size.
        labels: Label table store.
        inferencer: Loaded model, or ``None`` while no model is available.
        value_map: Normalized label to yen value.
    """

    def __init__(
        self,
        preprocessor: FramePreprocessor,
        labels: LabelStore,
        inferencer: BaseCountInferencer | None = None,
        value_map: Mapping[str, int] = COIN_VALUES,
    ) -> None:
        self.preprocessor = preprocessor
        self.labels = labels
        self.inferencer = inferencer
        self.value_map = value_map
        self._closed = False

    @classmethod
    def from_config(cls, config: PipelineConfig) -> PipelineContext:
        """Build a context, loading the model if one is configured.

        A model that fails to load is logged and left unloaded; ticks are
        then skipped until :meth:`attach_model` supplies one.
        """
        context = cls(
            preprocessor=FramePreprocessor(
                config.input_width, config.input_height, config.resample
            ),
            labels=LabelStore(config.labels_path),
        )
        if config.model_path is None:
            logger.warning("No model_path configured; ticks will be skipped")
            return context
        try:
            context.attach_model(
                ONNXCountInferencer(
                    config.model_path,
                    input_name=config.input_name,
                    input_shape=config.input_shape,
                    providers=config.providers,
                )
            )
        except (InferenceError, ShapeMismatchError) as exc:
            logger.error(f"Model not loaded from {config.model_path}: {exc}")
        return context

    @property
    def model_ready(self) -> bool:
        return (
            not self._closed
            and self.inferencer is not None
            and self.inferencer.is_loaded
        )

    def attach_model(self, inferencer: BaseCountInferencer) -> None:
        if self._closed:
            raise RuntimeError("Cannot attach a model to a closed PipelineContext")
        if self.inferencer is not None:
            self.inferencer.close()
        self.inferencer = inferencer

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.inferencer is not None:
            self.inferencer.close()
            self.inferencer = None

    def __enter__(self) -> PipelineContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
