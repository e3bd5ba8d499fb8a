"""Label table loading."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from coin_counter.errors import LabelLoadError
from coin_counter.types import LabelTable


def load_labels(path: str | Path) -> LabelTable:
    """Read a newline-delimited label file.

    Each line is trimmed; line order defines the model output index.
    Trailing blank lines are dropped, interior ones are kept so indices
    stay aligned.

    Raises:
        LabelLoadError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LabelLoadError(f"Cannot read labels from {path}: {exc}") from exc

    labels = [line.strip() for line in text.split("\n")]
    while labels and not labels[-1]:
        labels.pop()
    return tuple(labels)


class LabelStore:
    """Lazily loaded, cached label table.

    The label resource does not change while the process runs, so the first
    successful load is kept.  Failed loads are not cached.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._labels: LabelTable | None = None

    @property
    def is_loaded(self) -> bool:
        return self._labels is not None

    def get(self) -> LabelTable:
        if self._labels is None:
            self._labels = load_labels(self.path)
            logger.info(f"Loaded {len(self._labels)} labels from {self.path}")
        return self._labels
