"""Exception taxonomy for the capture-to-result pipeline.

Every error a tick can raise derives from :class:`CoinCounterError`, so the
pipeline runner and the capture loop can turn any of them into a
``TickFailure`` without catching unrelated exceptions.
"""

from __future__ import annotations


class CoinCounterError(Exception):
    """Base class for all pipeline errors."""


class CaptureError(CoinCounterError):
    """The camera failed to deliver a frame."""


class DecodeError(CoinCounterError):
    """The frame bytes are not a valid, supported image encoding."""


class ResizeError(CoinCounterError):
    """Resize target dimensions are not positive."""


class ModelNotLoadedError(CoinCounterError):
    """Inference was attempted without a loaded model."""


class ShapeMismatchError(CoinCounterError):
    """The input tensor does not match the model's fixed input shape."""

    def __init__(
        self, expected: tuple[int, ...], actual: tuple[int, ...]
    ) -> None:
        super().__init__(f"Expected input shape {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class InferenceError(CoinCounterError):
    """The inference engine failed while executing the model."""


class LabelLoadError(CoinCounterError):
    """The label resource could not be read."""


class IndexMismatchError(CoinCounterError):
    """The model output has more entries than the label table."""

    def __init__(self, num_outputs: int, num_labels: int) -> None:
        super().__init__(
            f"Model produced {num_outputs} values but only "
            f"{num_labels} labels are available"
        )
        self.num_outputs = num_outputs
        self.num_labels = num_labels
