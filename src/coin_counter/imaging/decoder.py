"""Decode encoded camera frames into RGB pixel grids."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from coin_counter.errors import DecodeError
from coin_counter.types import PixelGrid


def decode_image(data: bytes) -> PixelGrid:
    """Decode an encoded image buffer (JPEG, PNG, ...) into an RGB image.

    The image is loaded eagerly so that truncated buffers fail here rather
    than later during resizing.

    Raises:
        DecodeError: If ``data`` is empty or not a supported, intact image.
    """
    if not data:
        raise DecodeError("Empty frame buffer")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGB")
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise DecodeError(f"Cannot decode frame ({len(data)} bytes): {exc}") from exc
