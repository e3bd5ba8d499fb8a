"""Camera sources, display sinks and the periodic capture loop."""

from coin_counter.capture.camera import (
    BaseCamera,
    DirectoryCamera,
    OpenCVCamera,
    StaticCamera,
)
from coin_counter.capture.loop import CaptureLoop, LoopState
from coin_counter.capture.sink import BaseDisplaySink, ConsoleSink, MemorySink

__all__ = [
    "BaseCamera",
    "BaseDisplaySink",
    "CaptureLoop",
    "ConsoleSink",
    "DirectoryCamera",
    "LoopState",
    "MemorySink",
    "OpenCVCamera",
    "StaticCamera",
]
