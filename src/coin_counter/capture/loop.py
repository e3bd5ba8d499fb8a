"""Periodic capture loop driving one pipeline execution per tick."""

from __future__ import annotations

import threading
import time
from enum import Enum
from types import TracebackType

from loguru import logger

from coin_counter.aggregation.schemas import ClassificationResult
from coin_counter.capture.camera import BaseCamera
from coin_counter.capture.sink import BaseDisplaySink
from coin_counter.config import CaptureLoopConfig
from coin_counter.errors import CaptureError
from coin_counter.io.journal import ResultJournal
from coin_counter.pipeline import (
    PipelineContext,
    TickFailure,
    TickOutcome,
    TickSkipped,
    TickSuccess,
    run_pipeline,
)


class LoopState(Enum):
    """Scheduler lifecycle."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class TickState(Enum):
    """Execution guard for a single tick."""

    IDLE = "idle"
    RUNNING = "running"


class CaptureLoop:
    """Capture a frame every ``interval_ms`` and publish the coin tally.

    Ticks never overlap: the scheduler runs them one after another on a
    single worker, and ``tick`` itself refuses to start while another tick
    is running (it returns ``TickSkipped("busy")``).  A tick that overruns
    the interval delays the next one instead of stacking up.

    Failed ticks are logged and leave ``last_result`` and the sink as they
    were.  Teardown via ``close`` stops the scheduler before releasing the
    model, then the camera.

    Args:
        camera: Frame source.
        context: Model, labels and preprocessing shared by all ticks.
        sink: Receives the rendered text of each successful tick.
        config: Interval and optional tick limit.
        journal: Optional append-only record of published results.
    """

    def __init__(
        self,
        camera: BaseCamera,
        context: PipelineContext,
        sink: BaseDisplaySink,
        config: CaptureLoopConfig | None = None,
        journal: ResultJournal | None = None,
    ) -> None:
        self.camera = camera
        self.context = context
        self.sink = sink
        self.config = config or CaptureLoopConfig()
        self.journal = journal

        self.state = LoopState.IDLE
        self.last_result: ClassificationResult | None = None
        self.last_outcome: TickOutcome | None = None
        self.tick_count = 0

        self._tick_state = TickState.IDLE
        self._guard = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Single tick
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._tick_state is TickState.RUNNING

    def tick(self) -> TickOutcome:
        """Run one capture-to-result pass. Never raises."""
        with self._guard:
            if self._tick_state is TickState.RUNNING:
                logger.debug("Tick skipped: previous tick still running")
                return TickSkipped(reason="busy")
            self._tick_state = TickState.RUNNING
        try:
            outcome = self._tick()
        finally:
            with self._guard:
                self._tick_state = TickState.IDLE
        self.tick_count += 1
        self.last_outcome = outcome
        return outcome

    def _tick(self) -> TickOutcome:
        if not self.camera.is_ready:
            logger.debug("Tick skipped: camera not ready")
            return TickSkipped(reason="camera not ready")
        if not self.context.model_ready:
            logger.debug("Tick skipped: model not loaded")
            return TickSkipped(reason="model not loaded")

        try:
            try:
                frame = self.camera.capture()
            except CaptureError as exc:
                logger.warning(f"Capture failed: {exc}")
                return TickFailure.from_exception("capture", exc)

            outcome = run_pipeline(frame, self.context)
            if isinstance(outcome, TickSuccess):
                self._publish(outcome.result)
            return outcome
        except Exception as exc:
            logger.exception(f"Unexpected error during tick: {exc}")
            return TickFailure.from_exception("unexpected", exc)

    def _publish(self, result: ClassificationResult) -> None:
        self.sink.publish(result.render())
        self.last_result = result
        if self.journal is not None:
            try:
                self.journal.append(result)
            except OSError as exc:
                logger.error(f"Journal write to {self.journal.path} failed: {exc}")
        logger.info(f"Published: {' / '.join(result.lines())}")

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start ticking on a background worker thread."""
        if self._closed:
            raise RuntimeError("CaptureLoop is closed")
        if self.state is LoopState.RUNNING:
            logger.warning("CaptureLoop is already running")
            return
        self._stop_event.clear()
        self.state = LoopState.RUNNING
        self._worker = threading.Thread(
            target=self._schedule,
            args=(self.config.max_ticks,),
            name="capture-loop",
            daemon=True,
        )
        self._worker.start()
        logger.info(f"CaptureLoop started (interval={self.config.interval_ms} ms)")

    def run_forever(self, max_ticks: int | None = None) -> None:
        """Tick on the calling thread until stopped or ``max_ticks`` ticks ran."""
        if self._closed:
            raise RuntimeError("CaptureLoop is closed")
        self._stop_event.clear()
        self.state = LoopState.RUNNING
        try:
            self._schedule(max_ticks if max_ticks is not None else self.config.max_ticks)
        finally:
            self.state = LoopState.STOPPED

    def _schedule(self, max_ticks: int | None) -> None:
        interval = self.config.interval_s
        next_at = time.monotonic() + interval
        done = 0
        while not self._stop_event.wait(max(0.0, next_at - time.monotonic())):
            self.tick()
            done += 1
            if max_ticks is not None and done >= max_ticks:
                logger.info(f"CaptureLoop finished after {done} ticks")
                break
            next_at = max(next_at + interval, time.monotonic())
        self.state = LoopState.STOPPED

    def stop(self) -> None:
        """Cancel the scheduler and wait for an in-flight tick to finish."""
        self._stop_event.set()
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join()
        self._worker = None
        if self.state is not LoopState.IDLE:
            self.state = LoopState.STOPPED

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the background worker exits. Returns ``True`` if it did."""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def close(self) -> None:
        """Stop the scheduler, then release the model, then the camera."""
        if self._closed:
            return
        self.stop()
        self._closed = True
        self.context.close()
        self.camera.close()
        logger.info("CaptureLoop closed")

    def __enter__(self) -> CaptureLoop:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
