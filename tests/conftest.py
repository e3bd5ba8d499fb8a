"""Shared pytest fixtures for coin_counter tests."""

from __future__ import annotations

import io
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from coin_counter.capture import MemorySink, StaticCamera
from coin_counter.config import CaptureLoopConfig
from coin_counter.errors import ModelNotLoadedError, ShapeMismatchError
from coin_counter.imaging import FramePreprocessor
from coin_counter.inference import BaseCountInferencer, LabelStore
from coin_counter.pipeline import PipelineContext
from coin_counter.types import InputTensor, OutputVector

COIN_LABELS = ["1yen", "5yen", "10yen", "50yen", "100yen", "500yen", "other"]

# Small model input keeps tensors tiny in tests.
INPUT_SIZE = 8


class FakeInferencer(BaseCountInferencer):
    """In-process stand-in for the ONNX model returning a fixed vector.

    Records every call and its time span.  ``gate`` (if set) blocks ``run``
    until released, which lets tests hold a tick open; ``delay`` simulates a
    slow model.
    """

    def __init__(
        self,
        output: Sequence[float],
        size: int = INPUT_SIZE,
        gate: threading.Event | None = None,
        delay: float = 0.0,
    ) -> None:
        self.output = np.asarray(output, dtype=np.float64)
        self._shape = (1, 3, size, size)
        self.gate = gate
        self.delay = delay
        self.calls: list[tuple[int, ...]] = []
        self.spans: list[tuple[float, float]] = []
        self.entered = threading.Event()
        self.loaded = True
        self.close_calls = 0

    @property
    def input_shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def is_loaded(self) -> bool:
        return self.loaded

    def run(self, tensor: InputTensor) -> OutputVector:
        if not self.loaded:
            raise ModelNotLoadedError("released")
        if tuple(tensor.shape) != self._shape:
            raise ShapeMismatchError(self._shape, tuple(tensor.shape))
        start = time.monotonic()
        self.calls.append(tuple(tensor.shape))
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        self.spans.append((start, time.monotonic()))
        return self.output.copy()

    def close(self) -> None:
        self.close_calls += 1
        self.loaded = False


def encode_image(
    size: tuple[int, int] = (32, 24),
    color: tuple[int, int, int] = (200, 120, 40),
    fmt: str = "JPEG",
) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return encode_image()


@pytest.fixture()
def labels_file(tmp_path: Path) -> Path:
    """Label file as shipped with the app: one label per line, final newline."""
    path = tmp_path / "labels.txt"
    path.write_text("\n".join(COIN_LABELS) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def make_context(labels_file: Path) -> Callable[..., PipelineContext]:
    """Factory for a PipelineContext around a FakeInferencer."""

    def _make(
        output: Sequence[float] = (3.0, 0.0, 1.6, 0.4, 0.0, 0.0, 0.0),
        inferencer: BaseCountInferencer | None = None,
    ) -> PipelineContext:
        return PipelineContext(
            preprocessor=FramePreprocessor(INPUT_SIZE, INPUT_SIZE),
            labels=LabelStore(labels_file),
            inferencer=inferencer or FakeInferencer(output),
        )

    return _make


@pytest.fixture()
def camera(jpeg_bytes: bytes) -> StaticCamera:
    return StaticCamera(jpeg_bytes)


@pytest.fixture()
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture()
def fast_loop_config() -> CaptureLoopConfig:
    return CaptureLoopConfig(interval_ms=10)
