"""Shutdown report construction, wire serialization and submission."""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
import uuid
from datetime import datetime
from typing import Callable, Protocol

from shutdowntracker.models import (
    DeviceInfo,
    Location,
    NetworkCheckResult,
    ProbeOutcome,
    ShutdownReport,
    ShutdownStatus,
    SubmissionResult,
)

logger = logging.getLogger(__name__)


class ReportSubmitter(Protocol):
    """Protocol for handing a report to a remote collector."""

    def submit(self, report: ShutdownReport) -> SubmissionResult:
        ...


class ReportApiError(Exception):
    """Raised when a report query cannot be completed."""


def build_report(
    result: NetworkCheckResult,
    location: Location,
    device_info: DeviceInfo,
    created_at: datetime | None = None,
) -> ShutdownReport:
    """Build a SUSPECTED report from a cycle result."""
    return ShutdownReport(
        id=str(uuid.uuid4()),
        created_at=created_at if created_at is not None else datetime.now(),
        location=location,
        network_type=result.status.transport,
        device_info=device_info,
        probes=result.probes,
        signal_quality=result.status.signal_quality,
    )


def probe_to_dict(probe: ProbeOutcome) -> dict:
    """Serialize one probe outcome; undefined numerics become None."""
    return {
        "timestamp": probe.sampled_at.isoformat(),
        "success": probe.success,
        "response_time": probe.avg_ms,
        "target": probe.target,
        "packet_loss": probe.packet_loss,
        "jitter": probe.jitter_ms,
        "min_response_time": probe.min_ms,
        "max_response_time": probe.max_ms,
        "avg_response_time": probe.avg_ms,
        "total_packets_sent": probe.attempts,
        "total_packets_received": probe.successes,
    }


def report_to_dict(report: ShutdownReport) -> dict:
    """Serialize a report into the report API schema.

    Report and device keys are camelCase; probe entries are snake_case.
    """
    device = report.device_info
    return {
        "id": report.id,
        "timestamp": report.created_at.isoformat(),
        "district": report.location.district,
        "state": report.location.state,
        "latitude": report.location.latitude,
        "longitude": report.location.longitude,
        "networkType": report.network_type.value,
        "isConfirmed": report.is_confirmed,
        "userConfirmed": report.user_confirmed,
        "pingResults": [probe_to_dict(p) for p in report.probes],
        "deviceInfo": {
            # Key name fixed by the report API
            "androidVersion": device.os_version,
            "deviceModel": device.model,
            "carrier": device.carrier,
            "signalStrength": device.signal_strength_raw,
            "batteryLevel": device.battery_level,
        },
        "status": report.status.name,
        "signalQuality": report.signal_quality.value,
    }


class LoggingReportSubmitter:
    """Dry-run submitter that logs the payload instead of sending it."""

    def submit(self, report: ShutdownReport) -> SubmissionResult:
        logger.info(
            "Report (dry run): id=%s, network=%s, signal=%s, probes=%d",
            report.id,
            report.network_type.name,
            report.signal_quality.name,
            len(report.probes),
        )
        logger.debug("Report payload: %s", json.dumps(report_to_dict(report), indent=2))
        return SubmissionResult.ok()


class ReportApiClient:
    """JSON client for the shutdown report API.

    Endpoints:
        POST {base}/ping_report                        submit a report
        GET  {base}/ping_report                        list reports
        GET  {base}/ping                               list ping summaries
        PUT  {base}/ping_report/{id}/status?status=... confirm or reject
    """

    UPDATABLE_STATUSES = (ShutdownStatus.CONFIRMED, ShutdownStatus.FALSE_ALARM)

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        opener: Callable = urllib.request.urlopen,
    ):
        if not base_url:
            raise ValueError("base_url must not be empty")

        self.base_url = base_url.rstrip("/") + "/"
        self.timeout_s = timeout_s
        self._opener = opener

    def submit(self, report: ShutdownReport) -> SubmissionResult:
        """POST the report; failures are returned, never raised."""
        body = json.dumps(report_to_dict(report)).encode("utf-8")
        logger.info("Submitting report: id=%s, probes=%d", report.id, len(report.probes))

        result = self._send("POST", "ping_report", body)
        if result.success:
            logger.info("Report submitted: id=%s", report.id)
        else:
            logger.warning("Report submission failed: id=%s, reason=%s", report.id, result.reason)
        return result

    def update_status(self, report_id: str, status: ShutdownStatus) -> SubmissionResult:
        """Mark a report as confirmed or a false alarm."""
        if status not in self.UPDATABLE_STATUSES:
            raise ValueError(f"status must be CONFIRMED or FALSE_ALARM, got {status.name}")

        path = "ping_report/{}/status?{}".format(
            urllib.parse.quote(report_id, safe=""),
            urllib.parse.urlencode({"status": status.value}),
        )
        result = self._send("PUT", path, None)
        if not result.success:
            logger.warning(
                "Status update failed: id=%s, status=%s, reason=%s",
                report_id,
                status.value,
                result.reason,
            )
        return result

    def fetch_reports(self) -> list[dict]:
        """GET the list of submitted reports as raw dicts."""
        return self._get_list("ping_report")

    def fetch_ping_reports(self) -> list[dict]:
        """GET server-side ping summaries as raw dicts.

        Each entry carries ``id``, ``probe_time``, ``confirmed_shutdown``, an
        optional ``status`` and a ``ping_results`` list.
        """
        return self._get_list("ping")

    def _get_list(self, path: str) -> list[dict]:
        req = urllib.request.Request(
            self.base_url + path,
            headers={"Accept": "application/json"},
            method="GET",
        )
        try:
            with self._opener(req, timeout=self.timeout_s) as response:
                data = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise ReportApiError(f"API Error: {e.code}") from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise ReportApiError(str(e)) from e

        if not isinstance(data, list):
            raise ReportApiError("unexpected response body")
        return data

    def _send(self, method: str, path: str, body: bytes | None) -> SubmissionResult:
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(self.base_url + path, data=body, headers=headers, method=method)
        try:
            with self._opener(req, timeout=self.timeout_s) as response:
                code = response.status
        except urllib.error.HTTPError as e:
            return SubmissionResult.failed(f"API Error: {e.code}")
        except urllib.error.URLError as e:
            return SubmissionResult.failed(f"Unreachable: {e.reason}")
        except OSError as e:
            return SubmissionResult.failed(f"{type(e).__name__}: {e}")

        if 200 <= code < 300:
            return SubmissionResult.ok()
        return SubmissionResult.failed(f"API Error: {code}")
