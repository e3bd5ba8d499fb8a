"""Append-only JSON Lines journal of published results, using orjson."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import orjson

from coin_counter.aggregation.schemas import ClassificationResult


class ResultJournal:
    """Append one JSON object per published result to ``path``.

    Each record holds ``timestamp`` (ISO-8601, UTC), ``counts`` (label to
    count, original label text) and ``total_value``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(
        self, result: ClassificationResult, timestamp: datetime | None = None
    ) -> None:
        record = {
            "timestamp": (timestamp or datetime.now(tz=UTC)).isoformat(),
            "counts": {c.label: c.count for c in result.counts},
            "total_value": result.total_value,
        }
        with open(self.path, "ab") as f:
            f.write(orjson.dumps(record) + b"\n")

    def read(self) -> list[dict[str, object]]:
        """Load all records; an absent journal reads as empty."""
        if not self.path.exists():
            return []
        return [
            orjson.loads(line)
            for line in self.path.read_bytes().splitlines()
            if line.strip()
        ]
