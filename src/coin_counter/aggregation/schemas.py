"""Classification result schemas."""

from __future__ import annotations

from pydantic import BaseModel

TOTAL_LINE_TEMPLATE = "合計: {total}円"


class CoinCount(BaseModel, frozen=True):
    """One reported class: original label text, rounded count, unit value."""

    label: str
    count: int
    value: int

    def line(self) -> str:
        return f"{self.label} {self.count}"


class ClassificationResult(BaseModel, frozen=True):
    """Counts and yen total derived from one model output.

    Self-contained: renders to the multi-line display text without access
    to the label table or value map.
    """

    counts: list[CoinCount]
    total_value: int

    def lines(self) -> list[str]:
        """Per-class ``"<label> <count>"`` lines followed by the total line."""
        return [c.line() for c in self.counts] + [
            TOTAL_LINE_TEMPLATE.format(total=self.total_value)
        ]

    def render(self) -> str:
        return "\n".join(self.lines())
