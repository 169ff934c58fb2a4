"""Entry point for the headless shutdown tracker service."""

import logging
import shutil
import signal
import sys

from PySide6.QtCore import QCoreApplication, QTimer

from shutdowntracker.collector import FakeCollectorAdapter
from shutdowntracker.collector_ping import PingCollector, TcpConnectCollector
from shutdowntracker.config import TrackerConfig
from shutdowntracker.cycle import MonitoringCycle
from shutdowntracker.device import DeviceInfoProvider
from shutdowntracker.location import IpGeolocationProvider, StaticLocationProvider
from shutdowntracker.logging_config import configure_logging
from shutdowntracker.monitor import ConnectivityMonitor
from shutdowntracker.platform_status import (
    LinuxConnectivityProvider,
    PlatformReading,
    StaticConnectivityProvider,
)
from shutdowntracker.prober import Prober
from shutdowntracker.reporting import LoggingReportSubmitter, ReportApiClient
from shutdowntracker.scheduler import MonitoringLoop
from shutdowntracker.signal_quality import Transport

configure_logging()
logger = logging.getLogger(__name__)


def build_collector(config: TrackerConfig):
    """Select the reachability collector, falling back to TCP connects."""
    timeout_ms = config.probe.timeout_ms

    if config.collector == "fake":
        logger.info("Using FakeCollectorAdapter (TRACKER_COLLECTOR=fake)")
        return FakeCollectorAdapter()

    if config.collector == "ping":
        if shutil.which("ping") is not None:
            logger.info("Using PingCollector")
            return PingCollector(timeout_ms=timeout_ms)
        logger.warning("ping command not found; falling back to TCP connect checks")

    logger.info("Using TcpConnectCollector")
    return TcpConnectCollector(timeout_ms=timeout_ms)


def build_provider(config: TrackerConfig):
    if config.collector == "fake":
        return StaticConnectivityProvider(
            PlatformReading(
                connected=True,
                transport=Transport.WIFI,
                has_internet_capability=True,
                signal_strength_raw=-45,
            )
        )
    return LinuxConnectivityProvider()


def build_location_provider(config: TrackerConfig):
    if config.location_mode == "static":
        return StaticLocationProvider(config.static_location)
    if config.location_mode == "ip":
        return IpGeolocationProvider()
    return None


def build_cycle(config: TrackerConfig) -> MonitoringCycle:
    monitor = ConnectivityMonitor(
        provider=build_provider(config),
        prober=Prober(build_collector(config)),
        targets=config.targets,
        settings=config.probe,
    )

    if config.api_url:
        submitter = ReportApiClient(config.api_url)
    else:
        logger.info("TRACKER_API_URL not set; reports will be logged only")
        submitter = LoggingReportSubmitter()

    return MonitoringCycle(
        monitor=monitor,
        submitter=submitter,
        location_provider=build_location_provider(config),
        device_provider=DeviceInfoProvider(),
        threshold=config.threshold,
    )


def main():
    """Main entry point for the shutdown tracker service."""
    app = QCoreApplication(sys.argv)

    try:
        config = TrackerConfig.from_env()
    except ValueError as e:
        logger.error("Configuration invalid: %s", e)
        sys.exit(2)

    cycle = build_cycle(config)

    loops = [MonitoringLoop(cycle, interval_ms=config.interval_s * 1000, name="service")]
    if config.status_interval_s > 0:
        loops.append(
            MonitoringLoop(cycle, interval_ms=config.status_interval_s * 1000, name="status")
        )

    for loop in loops:
        loop.error.connect(lambda message, name=loop.name: logger.error("[%s] %s", name, message))
        loop.report_submitted.connect(
            lambda report, submission: logger.info(
                "Report handled: id=%s, delivered=%s, reason=%s",
                report.id,
                submission.success,
                submission.reason,
            )
        )

    def shutdown():
        for loop in loops:
            loop.stop()
        loops[0].thread_pool.waitForDone(2000)

    app.aboutToQuit.connect(shutdown)
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    signal.signal(signal.SIGTERM, lambda *_: app.quit())

    # Give the interpreter a chance to run signal handlers while Qt spins
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(500)

    for loop in loops:
        loop.start()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
