"""Camera-driven coin counting with an ONNX counting model."""

__version__ = "0.0.1"
