"""Tests for PipelineContext and run_pipeline."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from coin_counter.config import PipelineConfig
from coin_counter.errors import InferenceError, ShapeMismatchError
from coin_counter.pipeline import (
    PipelineContext,
    TickFailure,
    TickSuccess,
    run_pipeline,
)

from conftest import INPUT_SIZE, FakeInferencer


class TestRunPipeline:
    def test_success(
        self, jpeg_bytes: bytes, make_context: Callable[..., PipelineContext]
    ) -> None:
        context = make_context()
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickSuccess)
        assert outcome.status == "success"
        assert outcome.result.lines() == ["1yen 3", "10yen 2", "合計: 23円"]
        assert context.inferencer.calls == [(1, 3, INPUT_SIZE, INPUT_SIZE)]  # type: ignore[union-attr]

    def test_decode_failure(self, make_context: Callable[..., PipelineContext]) -> None:
        context = make_context()
        outcome = run_pipeline(b"\xff\xd8 broken", context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "decode"
        assert outcome.error_type == "DecodeError"
        assert context.inferencer.calls == []  # type: ignore[union-attr]

    def test_oversized_frame_fails_at_decode(
        self,
        jpeg_bytes: bytes,
        make_context: Callable[..., PipelineContext],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        context = make_context()
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "decode"
        assert outcome.error_type == "DecodeError"
        assert context.inferencer.calls == []  # type: ignore[union-attr]

    def test_index_mismatch(
        self, jpeg_bytes: bytes, make_context: Callable[..., PipelineContext]
    ) -> None:
        context = make_context(output=[1.0] * 9)
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "aggregate"
        assert outcome.error_type == "IndexMismatchError"

    def test_shape_mismatch(
        self, jpeg_bytes: bytes, make_context: Callable[..., PipelineContext]
    ) -> None:
        context = make_context(inferencer=FakeInferencer([1.0], size=16))
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "infer"
        assert outcome.error_type == "ShapeMismatchError"

    def test_missing_model(self, jpeg_bytes: bytes, labels_file: Path) -> None:
        context = PipelineContext.from_config(
            PipelineConfig(labels_path=str(labels_file), input_width=8, input_height=8)
        )
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "infer"
        assert outcome.error_type == "ModelNotLoadedError"

    def test_missing_labels(self, jpeg_bytes: bytes, tmp_path: Path) -> None:
        from coin_counter.imaging import FramePreprocessor
        from coin_counter.inference import LabelStore

        context = PipelineContext(
            preprocessor=FramePreprocessor(INPUT_SIZE, INPUT_SIZE),
            labels=LabelStore(tmp_path / "absent.txt"),
            inferencer=FakeInferencer([1.0]),
        )
        outcome = run_pipeline(jpeg_bytes, context)

        assert isinstance(outcome, TickFailure)
        assert outcome.stage == "labels"
        assert outcome.error_type == "LabelLoadError"

    def test_failed_decode_leaves_next_frame_unaffected(
        self, jpeg_bytes: bytes, make_context: Callable[..., PipelineContext]
    ) -> None:
        context = make_context()
        assert isinstance(run_pipeline(jpeg_bytes, context), TickSuccess)
        labels_before = context.labels.get()
        inferencer_before = context.inferencer

        assert isinstance(run_pipeline(b"garbage", context), TickFailure)

        outcome = run_pipeline(jpeg_bytes, context)
        assert isinstance(outcome, TickSuccess)
        assert outcome.result.total_value == 23
        assert context.labels.get() is labels_before
        assert context.inferencer is inferencer_before
        assert context.model_ready


class TestPipelineContext:
    def test_close_releases_model_once(
        self, make_context: Callable[..., PipelineContext]
    ) -> None:
        inferencer = FakeInferencer([0.0])
        context = make_context(inferencer=inferencer)
        assert context.model_ready

        context.close()
        context.close()

        assert inferencer.close_calls == 1
        assert not context.model_ready
        assert context.inferencer is None

    def test_attach_replaces_and_closes_previous(
        self, make_context: Callable[..., PipelineContext]
    ) -> None:
        old = FakeInferencer([0.0])
        context = make_context(inferencer=old)
        new = FakeInferencer([1.0])

        context.attach_model(new)

        assert old.close_calls == 1
        assert context.inferencer is new

    def test_from_config_without_model(self, labels_file: Path) -> None:
        context = PipelineContext.from_config(
            PipelineConfig(labels_path=str(labels_file))
        )
        assert not context.model_ready
        assert context.preprocessor.output_shape == (1, 3, 512, 512)

    @patch("coin_counter.pipeline.context.ONNXCountInferencer")
    def test_from_config_loads_model(
        self, mock_inferencer_cls: MagicMock, labels_file: Path
    ) -> None:
        mock_inferencer_cls.return_value.is_loaded = True
        cfg = PipelineConfig(
            model_path="model.onnx",
            labels_path=str(labels_file),
            input_width=320,
            input_height=240,
        )
        context = PipelineContext.from_config(cfg)

        assert context.model_ready
        mock_inferencer_cls.assert_called_once_with(
            "model.onnx",
            input_name="data",
            input_shape=(1, 3, 240, 320),
            providers=["CPUExecutionProvider"],
        )

    @patch("coin_counter.pipeline.context.ONNXCountInferencer")
    def test_from_config_model_load_failure_leaves_unloaded(
        self, mock_inferencer_cls: MagicMock, labels_file: Path
    ) -> None:
        mock_inferencer_cls.side_effect = InferenceError("bad model")
        cfg = PipelineConfig(model_path="bad.onnx", labels_path=str(labels_file))

        context = PipelineContext.from_config(cfg)

        assert not context.model_ready
        assert context.inferencer is None

    @patch("coin_counter.pipeline.context.ONNXCountInferencer")
    def test_from_config_shape_mismatch_leaves_unloaded(
        self, mock_inferencer_cls: MagicMock, labels_file: Path
    ) -> None:
        mock_inferencer_cls.side_effect = ShapeMismatchError(
            (1, 3, 4, 4), (1, 3, 512, 512)
        )
        cfg = PipelineConfig(model_path="small.onnx", labels_path=str(labels_file))

        context = PipelineContext.from_config(cfg)

        assert not context.model_ready
        assert context.inferencer is None

    def test_value_map_defaults_to_coins(
        self, make_context: Callable[..., PipelineContext]
    ) -> None:
        context = make_context()
        assert context.value_map["500yen"] == 500
        assert context.value_map["1yen"] == 1
