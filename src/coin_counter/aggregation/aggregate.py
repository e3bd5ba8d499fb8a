"""Turn per-label predicted counts into a coin tally and yen total."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from coin_counter.aggregation.schemas import (
    TOTAL_LINE_TEMPLATE,
    ClassificationResult,
    CoinCount,
)
from coin_counter.errors import IndexMismatchError
from coin_counter.types import OutputVector

OTHER_LABEL = "other"

COIN_VALUES: Mapping[str, int] = MappingProxyType(
    {
        "1yen": 1,
        "5yen": 5,
        "10yen": 10,
        "50yen": 50,
        "100yen": 100,
        "500yen": 500,
        OTHER_LABEL: 0,
    }
)

__all__ = [
    "COIN_VALUES",
    "OTHER_LABEL",
    "TOTAL_LINE_TEMPLATE",
    "aggregate",
    "coin_value",
    "normalize_label",
    "round_count",
]


def normalize_label(label: str) -> str:
    """Lowercase and drop all spaces, e.g. ``"100 Yen"`` -> ``"100yen"``."""
    return label.lower().replace(" ", "")


def round_count(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Non-finite values count as zero.
    """
    if not math.isfinite(value):
        return 0
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def coin_value(normalized_label: str, value_map: Mapping[str, int]) -> int:
    """Unit value for a normalized label; unmapped labels are worth 0."""
    if normalized_label in value_map:
        return value_map[normalized_label]
    return 0


def aggregate(
    output: OutputVector | Sequence[float],
    labels: Sequence[str],
    value_map: Mapping[str, int] = COIN_VALUES,
) -> ClassificationResult:
    """Map a count vector onto labels and sum the yen value.

    Entries with a rounded count of zero or less, and the ``"other"`` class,
    are left out.  Labels missing from ``value_map`` are still reported and
    contribute nothing to the total.

    Raises:
        IndexMismatchError: If ``output`` is longer than ``labels``.
    """
    values = [float(v) for v in output]
    if len(values) > len(labels):
        raise IndexMismatchError(len(values), len(labels))

    counts: list[CoinCount] = []
    total = 0
    for raw_label, raw_count in zip(labels, values):
        count = round_count(raw_count)
        normalized = normalize_label(raw_label)
        if count <= 0 or normalized == OTHER_LABEL:
            continue
        value = coin_value(normalized, value_map)
        counts.append(CoinCount(label=raw_label, count=count, value=value))
        total += value * count

    return ClassificationResult(counts=counts, total_value=total)
