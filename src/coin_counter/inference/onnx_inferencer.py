"""ONNX-based count inferencer."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import numpy as np
import onnxruntime as ort
from loguru import logger

from coin_counter.errors import (
    InferenceError,
    ModelNotLoadedError,
    ShapeMismatchError,
)
from coin_counter.inference.base import BaseCountInferencer
from coin_counter.types import InputTensor, OutputVector


class ONNXCountInferencer(BaseCountInferencer):
    """Run the coin counting model with onnxruntime.

    Each call binds the input and output through an IO binding that is
    cleared on every exit path, so engine-side buffers never outlive the
    call even when execution fails.

    Args:
        model: Path to the ``.onnx`` file, or the serialized model bytes.
        input_name: Name of the model input.  ``None`` uses the session's
            first input.
        input_shape: Fixed input shape.  ``None`` reads it from the model,
            which then must declare a fully static shape.
        providers: onnxruntime execution providers.

    Raises:
        InferenceError: If the model cannot be loaded or has no such input.
        ShapeMismatchError: If the model declares a static input shape
            different from ``input_shape``.
    """

    def __init__(
        self,
        model: str | Path | bytes,
        input_name: str | None = "data",
        input_shape: Sequence[int] | None = None,
        providers: list[str] | None = None,
    ) -> None:
        source: str | bytes = model if isinstance(model, bytes) else str(model)
        try:
            self.session: Any = ort.InferenceSession(
                source,
                providers=providers or ["CPUExecutionProvider"],
            )
        except Exception as exc:
            raise InferenceError(f"Failed to load ONNX model: {exc}") from exc

        inputs = self.session.get_inputs()
        input_names = [i.name for i in inputs]
        if input_name is None:
            input_name = input_names[0]
        elif input_name not in input_names:
            raise InferenceError(
                f"Model has no input named {input_name!r} (inputs: {input_names})"
            )
        self.input_name = input_name
        self.output_name = self.session.get_outputs()[0].name

        declared = inputs[input_names.index(input_name)].shape
        static = all(isinstance(d, int) for d in declared)
        if input_shape is None:
            if not static:
                raise InferenceError(
                    f"Model input {input_name!r} has dynamic shape {declared}; "
                    "pass input_shape explicitly"
                )
            input_shape = declared
        self._input_shape = tuple(int(d) for d in input_shape)
        if static and tuple(declared) != self._input_shape:
            raise ShapeMismatchError(tuple(declared), self._input_shape)

        logger.info(
            f"Loaded ONNX model (input={self.input_name}{list(self._input_shape)}, "
            f"output={self.output_name})"
        )

    @property
    def input_shape(self) -> tuple[int, ...]:
        return self._input_shape

    @property
    def is_loaded(self) -> bool:
        return self.session is not None

    def run(self, tensor: InputTensor) -> OutputVector:
        """Single tensor inference."""
        if self.session is None:
            raise ModelNotLoadedError("ONNX session has been released")
        if tuple(tensor.shape) != self._input_shape:
            raise ShapeMismatchError(self._input_shape, tuple(tensor.shape))

        array = np.ascontiguousarray(tensor, dtype=np.float32)
        try:
            with self._bound(array) as binding:
                self.session.run_with_iobinding(binding)
                outputs = binding.copy_outputs_to_cpu()
        except Exception as exc:
            raise InferenceError(f"ONNX inference failed: {exc}") from exc

        if not outputs:
            raise InferenceError("Model returned no outputs")
        return np.asarray(outputs[0], dtype=np.float64).reshape(-1)

    @contextmanager
    def _bound(self, array: np.ndarray) -> Iterator[Any]:  # type: ignore[type-arg]
        binding = self.session.io_binding()
        try:
            binding.bind_cpu_input(self.input_name, array)
            binding.bind_output(self.output_name)
            yield binding
        finally:
            binding.clear_binding_inputs()
            binding.clear_binding_outputs()

    def close(self) -> None:
        if self.session is not None:
            logger.info("Releasing ONNX session")
            self.session = None
