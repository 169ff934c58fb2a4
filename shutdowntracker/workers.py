"""Worker classes for background monitoring cycles."""

import logging
import threading

from PySide6.QtCore import QObject, QRunnable, Signal

from shutdowntracker.cycle import MonitoringCycle
from shutdowntracker.prober import ProbeCancelled

logger = logging.getLogger(__name__)


class CycleSignals(QObject):
    """Signals for communicating between worker threads and the loop."""

    result_ready = Signal(object, int)  # (NetworkCheckResult, generation_id)
    report_submitted = Signal(object, object, int)  # (ShutdownReport, SubmissionResult, generation_id)
    error = Signal(str, int)  # (message, generation_id)
    finished = Signal(int)  # generation_id


class CycleWorker(QRunnable):
    """Worker that executes one MonitoringCycle in a background thread."""

    def __init__(self, cycle: MonitoringCycle, generation_id: int, cancel_event: threading.Event):
        super().__init__()
        self.cycle = cycle
        self.generation_id = generation_id
        self.cancel_event = cancel_event
        self.signals = CycleSignals()

    def run(self):
        """Execute the cycle; every failure stops at this boundary."""
        try:
            logger.debug("Cycle starting: generation_id=%d", self.generation_id)

            outcome = self.cycle.run(self.cancel_event)

            self.signals.result_ready.emit(outcome.result, self.generation_id)
            if outcome.report is not None:
                self.signals.report_submitted.emit(
                    outcome.report, outcome.submission, self.generation_id
                )

            logger.debug(
                "Cycle finished: generation_id=%d, suspected=%s, reported=%s",
                self.generation_id,
                outcome.result.suspected,
                outcome.report is not None,
            )

        except ProbeCancelled as e:
            logger.info("Cycle cancelled: generation_id=%d, at=%s", self.generation_id, e)

        except Exception as e:
            logger.exception(
                "Cycle exception: generation_id=%d, error=%s", self.generation_id, str(e)
            )
            self.signals.error.emit(str(e), self.generation_id)

        finally:
            self.signals.finished.emit(self.generation_id)
