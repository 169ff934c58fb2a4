"""Periodic monitoring loop driven by a Qt timer."""

import logging
import threading

from PySide6.QtCore import QObject, QThreadPool, QTimer, Signal

from shutdowntracker.cycle import MonitoringCycle
from shutdowntracker.workers import CycleWorker

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 30 * 60 * 1000


class MonitoringLoop(QObject):
    """Runs a MonitoringCycle on a fixed interval.

    Key features:
    - First cycle runs as soon as the loop starts, then every interval_ms
    - At most one cycle in flight; ticks that arrive while busy are skipped
    - A failing cycle is logged and emitted on ``error``, the timer keeps going
    - stop() cancels the in-flight cycle and drops its late results via
      the generation id

    Two loops (e.g. a long-interval service loop and a short-interval status
    loop) may share a MonitoringCycle; neither holds state the other writes.

    Thread-safety: all state access on the Qt thread via signals/slots.
    """

    result_ready = Signal(object)  # NetworkCheckResult
    report_submitted = Signal(object, object)  # (ShutdownReport, SubmissionResult)
    error = Signal(str)

    def __init__(
        self,
        cycle: MonitoringCycle,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        name: str = "service",
        thread_pool: QThreadPool | None = None,
        parent=None,
    ):
        """Initialize monitoring loop.

        Args:
            cycle: Cycle executed on every tick
            interval_ms: Period between cycles in milliseconds
            name: Label used in log events
            thread_pool: Pool for cycle workers (defaults to the global pool)
            parent: Qt parent object
        """
        super().__init__(parent)

        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self.cycle = cycle
        self.interval_ms = interval_ms
        self.name = name

        self._in_flight = False
        self._cancel_event: threading.Event | None = None

        # Generation ID for invalidating stale results
        self._generation_id = 0

        self.thread_pool = thread_pool if thread_pool is not None else QThreadPool.globalInstance()

        self.timer = QTimer(self)
        self.timer.timeout.connect(self._schedule_tick)

        self.is_running = False

    def start(self):
        """Start the loop and run the first cycle immediately."""
        if self.is_running:
            return

        self.is_running = True
        self.timer.start(self.interval_ms)
        logger.info("Loop started: name=%s, interval=%dms", self.name, self.interval_ms)
        self._schedule_tick()

    def stop(self):
        """Stop the loop, cancel the in-flight cycle and invalidate its results."""
        if not self.is_running:
            return

        self.is_running = False
        self.timer.stop()
        self._generation_id += 1
        if self._cancel_event is not None:
            self._cancel_event.set()
        # The cancelled worker may still be unwinding; its finish is stale
        self._in_flight = False
        self._cancel_event = None
        logger.info("Loop stopped: name=%s, generation_id=%d", self.name, self._generation_id)

    def set_interval(self, interval_ms: int):
        """Update the period between cycles."""
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self.interval_ms = interval_ms
        if self.timer.isActive():
            self.timer.setInterval(interval_ms)
        logger.debug("Interval updated: name=%s, interval=%dms", self.name, interval_ms)

    def run_now(self):
        """Run a cycle immediately if the loop is running and idle."""
        self._schedule_tick()

    def _schedule_tick(self):
        if not self.is_running:
            return

        if self._in_flight:
            logger.info("Tick skipped: name=%s, previous cycle still running", self.name)
            return

        self._in_flight = True
        self._cancel_event = threading.Event()

        worker = CycleWorker(self.cycle, self._generation_id, self._cancel_event)
        worker.signals.result_ready.connect(self._on_result_ready)
        worker.signals.report_submitted.connect(self._on_report_submitted)
        worker.signals.error.connect(self._on_cycle_error)
        worker.signals.finished.connect(self._on_cycle_finished)

        logger.debug("Cycle scheduled: name=%s, generation_id=%d", self.name, self._generation_id)
        self.thread_pool.start(worker)

    def _is_stale(self, generation_id: int) -> bool:
        if generation_id != self._generation_id:
            logger.debug(
                "Ignoring stale result: name=%s, generation_id=%d (current=%d)",
                self.name,
                generation_id,
                self._generation_id,
            )
            return True
        return not self.is_running

    def _on_result_ready(self, result, generation_id):
        if self._is_stale(generation_id):
            return
        self.result_ready.emit(result)

    def _on_report_submitted(self, report, submission, generation_id):
        if self._is_stale(generation_id):
            return
        self.report_submitted.emit(report, submission)

    def _on_cycle_error(self, message, generation_id):
        if self._is_stale(generation_id):
            return
        logger.error("Cycle error: name=%s, error=%s", self.name, message)
        self.error.emit(message)

    def _on_cycle_finished(self, generation_id):
        if generation_id != self._generation_id:
            return
        self._in_flight = False
        self._cancel_event = None

    def get_stats(self):
        """Get loop statistics.

        Returns:
            Dict with loop state info
        """
        return {
            "name": self.name,
            "running": self.is_running,
            "in_flight": self._in_flight,
            "interval_ms": self.interval_ms,
            "generation_id": self._generation_id,
        }
