"""Camera sources delivering one encoded still frame per capture.

Supports:
- OpenCV devices (USB webcams, Pi cameras exposed through V4L2)
- a directory of encoded images, replayed in order (development/simulation)
- a fixed in-memory frame (tests)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType

import cv2
from loguru import logger

from coin_counter.errors import CaptureError
from coin_counter.utils.hydra import register

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp")


class BaseCamera(ABC):
    """A camera that can capture one still frame as encoded bytes."""

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether ``capture`` can be called."""

    @abstractmethod
    def capture(self) -> bytes:
        """Capture one frame, encoded (JPEG/PNG).

        Raises:
            CaptureError: If no frame could be obtained.
        """

    def close(self) -> None:
        """Release the device."""

    def __enter__(self) -> BaseCamera:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


@register(group="camera", name="static")
class StaticCamera(BaseCamera):
    """Returns the same encoded frame on every capture."""

    def __init__(self, frame: bytes = b"", ready: bool = True) -> None:
        self.frame = frame
        self.ready = ready

    @property
    def is_ready(self) -> bool:
        return self.ready

    def capture(self) -> bytes:
        return self.frame


@register(group="camera", name="directory", root="???", loop=True)
class DirectoryCamera(BaseCamera):
    """Replay encoded image files from a directory in sorted order.

    Args:
        root: Directory searched recursively for image files.
        loop: Start over after the last file; otherwise the camera stops
            being ready once exhausted.
    """

    def __init__(self, root: str | Path, loop: bool = True) -> None:
        self.root = Path(root)
        self.loop = loop
        self.files = sorted(
            p
            for p in self.root.rglob("*")
            if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        )
        self._index = 0
        if not self.files:
            logger.warning(f"No image files found under {self.root}")
        else:
            logger.info(f"DirectoryCamera replaying {len(self.files)} files")

    @property
    def is_ready(self) -> bool:
        return bool(self.files) and (self.loop or self._index < len(self.files))

    def capture(self) -> bytes:
        if not self.is_ready:
            raise CaptureError(f"No more frames under {self.root}")
        path = self.files[self._index % len(self.files)]
        self._index += 1
        try:
            return path.read_bytes()
        except OSError as exc:
            raise CaptureError(f"Cannot read frame {path}: {exc}") from exc


@register(group="camera", name="opencv", device=0, width=640, height=480)
class OpenCVCamera(BaseCamera):
    """Grab frames from an OpenCV video device and JPEG-encode them.

    Args:
        device: Device index or video path.
        width: Requested capture width.
        height: Requested capture height.
        jpeg_quality: Encoding quality for the returned frame.
    """

    def __init__(
        self,
        device: int | str = 0,
        width: int = 640,
        height: int = 480,
        jpeg_quality: int = 95,
    ) -> None:
        self.device = device
        self.jpeg_quality = jpeg_quality
        self._capture: cv2.VideoCapture | None = cv2.VideoCapture(device)
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        if self._capture.isOpened():
            logger.info(f"OpenCV camera {device} opened")
        else:
            logger.error(f"OpenCV camera {device} could not be opened")

    @property
    def is_ready(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def capture(self) -> bytes:
        cap = self._capture
        if cap is None or not cap.isOpened():
            raise CaptureError(f"Camera {self.device} is not open")
        ok, frame = cap.read()
        if not ok or frame is None:
            raise CaptureError(f"Camera {self.device} returned no frame")
        ok, encoded = cv2.imencode(
            ".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality]
        )
        if not ok:
            raise CaptureError("JPEG encoding of captured frame failed")
        return encoded.tobytes()

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"OpenCV camera {self.device} released")
