"""Type aliases for coin_counter inter-module contracts."""

from typing import TypeAlias

import numpy as np
import numpy.typing as npt
from PIL import Image

# Decoded RGB frame. Treated as immutable once produced by the decoder.
PixelGrid: TypeAlias = Image.Image

# float32, shape (1, 3, H, W), channel-major, values in [0.0, 1.0].
InputTensor: TypeAlias = npt.NDArray[np.float32]

# 1-D per-label predicted counts, index-aligned with the label table.
OutputVector: TypeAlias = npt.NDArray[np.floating]

LabelTable: TypeAlias = tuple[str, ...]
