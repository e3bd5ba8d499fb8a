"""Count-model inference framework."""

from coin_counter.inference.base import BaseCountInferencer
from coin_counter.inference.labels import LabelStore, load_labels
from coin_counter.inference.onnx_inferencer import ONNXCountInferencer

__all__ = [
    "BaseCountInferencer",
    "LabelStore",
    "ONNXCountInferencer",
    "load_labels",
]
