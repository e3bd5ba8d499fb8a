"""Frame decoding and tensor preprocessing."""

from coin_counter.imaging.decoder import decode_image
from coin_counter.imaging.preprocess import FramePreprocessor, resize, to_tensor

__all__ = [
    "FramePreprocessor",
    "decode_image",
    "resize",
    "to_tensor",
]
