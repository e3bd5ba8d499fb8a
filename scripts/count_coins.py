#!/usr/bin/env python3
"""Count coins in still images with the ONNX counting model.

Runs each image through the same decode -> resize -> infer -> aggregate
pipeline as the capture loop and prints a per-image table.

Usage::

    python scripts/count_coins.py \\
        --model assets/models/coin_model_v2.onnx \\
        --labels assets/labels.txt \\
        photos/*.jpg

    # Whole directory, results appended to a journal
    python scripts/count_coins.py \\
        --model assets/models/coin_model_v2.onnx \\
        --labels assets/labels.txt \\
        --journal runs/counts.jsonl \\
        photos/
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.table import Table

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from coin_counter.capture.camera import IMAGE_EXTENSIONS  # noqa: E402
from coin_counter.config import PipelineConfig  # noqa: E402
from coin_counter.io.journal import ResultJournal  # noqa: E402
from coin_counter.pipeline import (  # noqa: E402
    PipelineContext,
    TickFailure,
    TickSuccess,
    run_pipeline,
)


def collect_images(inputs: list[Path]) -> list[Path]:
    """Expand directories into their image files, keep explicit files as-is."""
    images: list[Path] = []
    for item in inputs:
        if item.is_dir():
            images.extend(
                sorted(
                    p
                    for p in item.rglob("*")
                    if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
                )
            )
        elif item.is_file():
            images.append(item)
        else:
            logger.warning(f"Skipping missing path: {item}")
    return images


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[0])
    parser.add_argument("images", nargs="+", type=Path)
    parser.add_argument("--model", type=Path, required=True)
    parser.add_argument("--labels", type=Path, required=True)
    parser.add_argument("--input-name", default="data")
    parser.add_argument("--size", type=int, default=512, help="Model input side")
    parser.add_argument(
        "--resample", choices=["bilinear", "nearest"], default="bilinear"
    )
    parser.add_argument("--journal", type=Path, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level)

    config = PipelineConfig(
        model_path=str(args.model),
        labels_path=str(args.labels),
        input_name=args.input_name,
        input_width=args.size,
        input_height=args.size,
        resample=args.resample,
    )
    images = collect_images(args.images)
    if not images:
        logger.error("No images to process")
        sys.exit(1)

    journal = ResultJournal(args.journal) if args.journal else None

    table = Table(title="Coin counts")
    table.add_column("Image", style="cyan")
    table.add_column("Counts")
    table.add_column("Total (円)", justify="right", style="bold")

    failures = 0
    with PipelineContext.from_config(config) as context:
        if not context.model_ready:
            logger.error(f"Model could not be loaded from {args.model}")
            sys.exit(1)
        for path in images:
            outcome = run_pipeline(path.read_bytes(), context)
            if isinstance(outcome, TickSuccess):
                result = outcome.result
                counts = ", ".join(c.line() for c in result.counts) or "-"
                table.add_row(path.name, counts, str(result.total_value))
                if journal is not None:
                    journal.append(result)
            elif isinstance(outcome, TickFailure):
                failures += 1
                table.add_row(path.name, f"[red]{outcome.error_type}[/red]", "-")

    Console().print(table)
    if failures:
        logger.warning(f"{failures}/{len(images)} images failed")


if __name__ == "__main__":
    main()
