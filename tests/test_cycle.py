"""Tests for MonitoringCycle report gating and submission handling."""

import threading

import pytest

from shutdowntracker.collector import FakeCollectorAdapter
from shutdowntracker.cycle import DEFAULT_REPORT_THRESHOLD, MonitoringCycle
from shutdowntracker.device import DeviceInfoProvider
from shutdowntracker.fake_collector import FakeCollector
from shutdowntracker.location import StaticLocationProvider
from shutdowntracker.models import (
    UNKNOWN_LOCATION,
    ConnectivityStatus,
    Location,
    NetworkCheckResult,
    ShutdownStatus,
    SubmissionResult,
)
from shutdowntracker.monitor import DEFAULT_TARGETS, ConnectivityMonitor, ProbeSettings
from shutdowntracker.platform_status import PlatformReading, StaticConnectivityProvider
from shutdowntracker.prober import Prober
from shutdowntracker.signal_quality import SignalQuality, Transport

FAST = ProbeSettings(attempts_per_target=2, timeout_ms=1000, interval_ms=0)

SHUTDOWN_READING = PlatformReading(
    connected=True,
    transport=Transport.MOBILE,
    has_internet_capability=False,
    signal_strength_raw=3,
    carrier_name="Example Mobile",
)
HEALTHY_READING = PlatformReading(
    connected=True,
    transport=Transport.WIFI,
    has_internet_capability=True,
    signal_strength_raw=-45,
)


class RecordingSubmitter:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else SubmissionResult.ok()
        self.error = error
        self.reports = []

    def submit(self, report):
        self.reports.append(report)
        if self.error is not None:
            raise self.error
        return self.result


class FixedMonitor:
    """Monitor stand-in that returns a prepared result."""

    def __init__(self, result):
        self.result = result

    def check_connectivity(self, cancel_event=None):
        return self.result


class FailingLocationProvider:
    def current_location(self):
        raise OSError("geolocation service down")


class CountingLocationProvider:
    def __init__(self):
        self.calls = 0

    def current_location(self):
        self.calls += 1
        return None


def make_monitor(reading, unreachable=()):
    collector = FakeCollectorAdapter(
        FakeCollector(seed=5, loss_probability=0.0, unreachable_hosts=tuple(unreachable))
    )
    return ConnectivityMonitor(StaticConnectivityProvider(reading), Prober(collector), settings=FAST)


def fixed_result(suspected, confidence):
    status = ConnectivityStatus(
        connected=True, transport=Transport.WIFI, has_internet_capability=False, signal_strength_raw=-40
    )
    return NetworkCheckResult(status=status, probes=(), suspected=suspected, confidence=confidence)


@pytest.fixture
def device_provider(tmp_path):
    return DeviceInfoProvider(sys_root=tmp_path)


class TestReportGating:
    def test_suspected_shutdown_is_reported(self, device_provider):
        submitter = RecordingSubmitter()
        location = Location(district="Srinagar", state="Jammu and Kashmir", latitude=34.08, longitude=74.79)
        cycle = MonitoringCycle(
            make_monitor(SHUTDOWN_READING, unreachable=DEFAULT_TARGETS),
            submitter,
            location_provider=StaticLocationProvider(location),
            device_provider=device_provider,
        )

        outcome = cycle.run()

        assert outcome.result.suspected is True
        assert outcome.submission.success is True
        assert submitter.reports == [outcome.report]

        report = outcome.report
        assert report.status == ShutdownStatus.SUSPECTED
        assert report.location == location
        assert report.network_type == Transport.MOBILE
        assert report.signal_quality == SignalQuality.GOOD
        assert report.device_info.carrier == "Example Mobile"
        assert report.device_info.signal_strength_raw == 3
        assert len(report.probes) == len(DEFAULT_TARGETS)

    def test_healthy_network_not_reported(self, device_provider):
        submitter = RecordingSubmitter()
        cycle = MonitoringCycle(make_monitor(HEALTHY_READING), submitter, device_provider=device_provider)

        outcome = cycle.run()

        assert outcome.report is None
        assert outcome.submission is None
        assert submitter.reports == []

    def test_threshold_is_strict(self, device_provider):
        submitter = RecordingSubmitter()
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.7)), submitter, device_provider=device_provider
        )

        assert cycle.run().report is None
        assert submitter.reports == []

    def test_confidence_alone_does_not_report(self, device_provider):
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(False, 0.95)), RecordingSubmitter(), device_provider=device_provider
        )
        assert cycle.run().report is None

    def test_should_report(self):
        cycle = MonitoringCycle(FixedMonitor(None), RecordingSubmitter(), threshold=0.5)

        assert cycle.should_report(fixed_result(True, 0.51)) is True
        assert cycle.should_report(fixed_result(True, 0.5)) is False
        assert cycle.should_report(fixed_result(False, 1.0)) is False

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError, match="threshold"):
            MonitoringCycle(FixedMonitor(None), RecordingSubmitter(), threshold=threshold)

    def test_default_threshold(self):
        assert MonitoringCycle(FixedMonitor(None), RecordingSubmitter()).threshold == DEFAULT_REPORT_THRESHOLD


class TestReportDelivery:
    def test_missing_location_uses_sentinel(self, device_provider):
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.9)),
            RecordingSubmitter(),
            location_provider=FailingLocationProvider(),
            device_provider=device_provider,
        )
        assert cycle.run().report.location == UNKNOWN_LOCATION

    def test_failed_submission_returned(self, device_provider):
        submitter = RecordingSubmitter(result=SubmissionResult.failed("API Error: 503"))
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.9)), submitter, device_provider=device_provider
        )

        outcome = cycle.run()

        assert outcome.report is not None
        assert outcome.submission.success is False
        assert outcome.submission.reason == "API Error: 503"

    def test_raising_submitter_becomes_failed_result(self, device_provider):
        submitter = RecordingSubmitter(error=RuntimeError("boom"))
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.9)), submitter, device_provider=device_provider
        )

        outcome = cycle.run()

        assert outcome.submission.success is False
        assert "boom" in outcome.submission.reason

    def test_each_report_has_unique_id(self, device_provider):
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.9)), RecordingSubmitter(), device_provider=device_provider
        )
        assert cycle.run().report.id != cycle.run().report.id


class TestCancellation:
    def test_cancelled_cycle_does_not_report(self, device_provider):
        submitter = RecordingSubmitter()
        location = CountingLocationProvider()
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.95)),
            submitter,
            location_provider=location,
            device_provider=device_provider,
        )
        cancel = threading.Event()
        cancel.set()

        outcome = cycle.run(cancel)

        assert outcome.result.suspected is True
        assert outcome.report is None
        assert outcome.submission is None
        assert submitter.reports == []
        assert location.calls == 0

    def test_unset_cancel_event_still_reports(self, device_provider):
        submitter = RecordingSubmitter()
        cycle = MonitoringCycle(
            FixedMonitor(fixed_result(True, 0.95)), submitter, device_provider=device_provider
        )

        outcome = cycle.run(threading.Event())

        assert submitter.reports == [outcome.report]
