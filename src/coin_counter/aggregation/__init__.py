"""Post-processing of per-label count vectors."""

from coin_counter.aggregation.aggregate import (
    COIN_VALUES,
    TOTAL_LINE_TEMPLATE,
    aggregate,
    coin_value,
    normalize_label,
    round_count,
)
from coin_counter.aggregation.schemas import ClassificationResult, CoinCount

__all__ = [
    "COIN_VALUES",
    "TOTAL_LINE_TEMPLATE",
    "ClassificationResult",
    "CoinCount",
    "aggregate",
    "coin_value",
    "normalize_label",
    "round_count",
]
