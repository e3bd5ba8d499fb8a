"""Capture loop entrypoint for coin_counter.

Usage:
    python -m coin_counter.run pipeline.model_path=models/coin_model_v2.onnx
    python -m coin_counter.run camera=directory camera.root=samples loop.max_ticks=5
    python -m coin_counter.run sink=console loop.interval_ms=500
"""

import sys
from pathlib import Path

import hydra
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# Import capture classes so their @register decorators populate the ConfigStore
import coin_counter.capture  # noqa: F401
from coin_counter.capture import BaseCamera, BaseDisplaySink, CaptureLoop
from coin_counter.config import CaptureLoopConfig, PipelineConfig
from coin_counter.io.journal import ResultJournal
from coin_counter.pipeline import PipelineContext


def build_loop(cfg: DictConfig) -> CaptureLoop:
    """Assemble camera, pipeline context, sink and loop from a config."""
    pipeline_cfg = PipelineConfig(**OmegaConf.to_container(cfg.pipeline, resolve=True))  # type: ignore[arg-type]
    loop_cfg = CaptureLoopConfig(**OmegaConf.to_container(cfg.loop, resolve=True))  # type: ignore[arg-type]

    camera: BaseCamera = hydra.utils.instantiate(cfg.camera)
    sink: BaseDisplaySink = hydra.utils.instantiate(cfg.sink)
    context = PipelineContext.from_config(pipeline_cfg)
    journal = (
        ResultJournal(Path(loop_cfg.journal_path)) if loop_cfg.journal_path else None
    )
    return CaptureLoop(camera, context, sink, config=loop_cfg, journal=journal)


@hydra.main(version_base=None, config_path="conf", config_name="run_coin_counter")
def main(cfg: DictConfig) -> None:
    """Run the capture loop until interrupted or ``loop.max_ticks`` is reached."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    with build_loop(cfg) as loop:
        try:
            loop.run_forever()
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
