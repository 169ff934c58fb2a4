"""One monitoring cycle: check, decide, and report when warranted."""

import logging
import threading
from dataclasses import dataclass

from shutdowntracker.device import DeviceInfoProvider
from shutdowntracker.location import LocationProvider, resolve_location
from shutdowntracker.models import NetworkCheckResult, ShutdownReport, SubmissionResult
from shutdowntracker.monitor import ConnectivityMonitor
from shutdowntracker.reporting import ReportSubmitter, build_report

logger = logging.getLogger(__name__)

DEFAULT_REPORT_THRESHOLD = 0.7


@dataclass(frozen=True)
class CycleOutcome:
    """Result of a cycle plus the report it triggered, if any."""

    result: NetworkCheckResult
    report: ShutdownReport | None = None
    submission: SubmissionResult | None = None


class MonitoringCycle:
    """Runs a connectivity check and forwards a report past the threshold.

    A report is built only when the classifier suspects a shutdown and the
    confidence is strictly above ``threshold``. Submission failures are
    logged and returned; they are not retried here.
    """

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        submitter: ReportSubmitter,
        location_provider: LocationProvider | None = None,
        device_provider: DeviceInfoProvider | None = None,
        threshold: float = DEFAULT_REPORT_THRESHOLD,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")

        self.monitor = monitor
        self.submitter = submitter
        self.location_provider = location_provider
        self.device_provider = device_provider if device_provider is not None else DeviceInfoProvider()
        self.threshold = threshold

    def should_report(self, result: NetworkCheckResult) -> bool:
        return result.suspected and result.confidence > self.threshold

    def run(self, cancel_event: threading.Event | None = None) -> CycleOutcome:
        result = self.monitor.check_connectivity(cancel_event)

        if not self.should_report(result):
            return CycleOutcome(result=result)

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Cycle cancelled before reporting: cycle_id=%s", result.cycle_id)
            return CycleOutcome(result=result)

        logger.warning(
            "Shutdown suspected: cycle_id=%s, confidence=%.2f, poor_signal=%s, confirmed=%s",
            result.cycle_id,
            result.confidence,
            result.is_poor_signal,
            result.is_confirmed_shutdown,
        )

        location = resolve_location(self.location_provider)
        report = build_report(result, location, self.device_provider.device_info(result.status))
        logger.info(
            "Report built: cycle_id=%s, report_id=%s, district=%s, state=%s",
            result.cycle_id,
            report.id,
            location.district,
            location.state,
        )

        try:
            submission = self.submitter.submit(report)
        except Exception as e:
            logger.warning("Submitter raised: report_id=%s, error=%s", report.id, e, exc_info=True)
            submission = SubmissionResult.failed(str(e))

        if not submission.success:
            logger.warning(
                "Report not delivered: report_id=%s, reason=%s", report.id, submission.reason
            )

        return CycleOutcome(result=result, report=report, submission=submission)
