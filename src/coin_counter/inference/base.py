"""Abstract base class for count inferencers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from coin_counter.types import InputTensor, OutputVector


class BaseCountInferencer(ABC):
    """Base class for count inferencers.

    An inferencer owns a loaded model handle and turns one preprocessed
    ``(1, 3, H, W)`` tensor into a flat vector of per-label counts.  It does
    not interpret the values.  Subclasses must release the model in
    ``close``; calling ``run`` afterwards raises ``ModelNotLoadedError``.
    """

    @property
    @abstractmethod
    def input_shape(self) -> tuple[int, ...]:
        """Fixed input shape the model accepts."""

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether a model is currently held."""

    @abstractmethod
    def run(self, tensor: InputTensor) -> OutputVector:
        """Run inference on a single preprocessed tensor.

        Returns the first model output flattened to 1-D.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the model. Safe to call more than once."""

    def __enter__(self) -> BaseCountInferencer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
