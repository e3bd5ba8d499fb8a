"""Resize frames to the model resolution and build channel-planar tensors.

The interpolation policy is part of the model contract: the counting model
was exported against bilinear-resized 512x512 inputs, and a different
filter shifts the predicted counts.  Bilinear is therefore the default and
the only other accepted policy is nearest-neighbour.
"""

from __future__ import annotations

from typing import Literal

import numpy as np
from PIL import Image

from coin_counter.errors import ResizeError
from coin_counter.types import InputTensor, PixelGrid

ResampleName = Literal["bilinear", "nearest"]

_RESAMPLE: dict[str, Image.Resampling] = {
    "bilinear": Image.Resampling.BILINEAR,
    "nearest": Image.Resampling.NEAREST,
}


def resize(
    grid: PixelGrid,
    target_w: int,
    target_h: int,
    resample: ResampleName = "bilinear",
) -> PixelGrid:
    """Resize to exactly ``(target_w, target_h)``, ignoring aspect ratio."""
    if target_w <= 0 or target_h <= 0:
        raise ResizeError(f"Invalid resize target {target_w}x{target_h}")
    if resample not in _RESAMPLE:
        raise ValueError(f"Unknown resample policy: {resample!r}")
    if grid.size == (target_w, target_h):
        return grid
    return grid.resize((target_w, target_h), resample=_RESAMPLE[resample])


def to_tensor(
    grid: PixelGrid,
    target_w: int,
    target_h: int,
    resample: ResampleName = "bilinear",
) -> InputTensor:
    """Build a ``(1, 3, target_h, target_w)`` float32 tensor in [0, 1].

    Layout is channel-major: all R values row by row, then G, then B.
    """
    resized = resize(grid, target_w, target_h, resample)
    if resized.mode != "RGB":
        resized = resized.convert("RGB")
    hwc = np.asarray(resized, dtype=np.uint8)
    chw = hwc.transpose(2, 0, 1).astype(np.float32) / 255.0
    return np.ascontiguousarray(chw[np.newaxis])


class FramePreprocessor:
    """Preprocessor bound to a fixed model input resolution.

    Args:
        width: Model input width.
        height: Model input height.
        resample: Interpolation policy, ``"bilinear"`` or ``"nearest"``.
    """

    def __init__(
        self, width: int, height: int, resample: ResampleName = "bilinear"
    ) -> None:
        if width <= 0 or height <= 0:
            raise ResizeError(f"Invalid model input size {width}x{height}")
        self.width = width
        self.height = height
        self.resample = resample

    @property
    def output_shape(self) -> tuple[int, int, int, int]:
        return (1, 3, self.height, self.width)

    def __call__(self, grid: PixelGrid) -> InputTensor:
        return to_tensor(grid, self.width, self.height, self.resample)
