"""Connectivity monitor: one sampling cycle from platform read to verdict."""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Sequence

from shutdowntracker.classifier import aggregate_packet_loss, classify
from shutdowntracker.models import ConnectivityStatus, NetworkCheckResult
from shutdowntracker.platform_status import ConnectivityProvider, PlatformReading
from shutdowntracker.prober import Prober
from shutdowntracker.scoring import score_breakdown

logger = logging.getLogger(__name__)

DEFAULT_TARGETS = ("8.8.8.8", "1.1.1.1", "208.67.222.222")


@dataclass(frozen=True)
class ProbeSettings:
    """Per-cycle probing parameters."""

    attempts_per_target: int = 3
    timeout_ms: int = 5000
    interval_ms: int = 1000


class ConnectivityMonitor:
    """Samples platform state, probes targets and produces a NetworkCheckResult.

    Holds no state between cycles, so several loops may share one instance.
    """

    def __init__(
        self,
        provider: ConnectivityProvider,
        prober: Prober,
        targets: Sequence[str] = DEFAULT_TARGETS,
        settings: ProbeSettings | None = None,
    ):
        self.provider = provider
        self.prober = prober
        self.targets = tuple(targets)
        self.settings = settings if settings is not None else ProbeSettings()

        if not self.targets:
            logger.warning("No probe targets configured; network state will read as unknown")

    def read_status(self) -> ConnectivityStatus:
        """Read the platform state, degrading to a disconnected reading on error."""
        try:
            reading = self.provider.current_status()
        except Exception as e:
            logger.warning("Platform status read failed: %s", e, exc_info=True)
            reading = PlatformReading(connected=False)

        return ConnectivityStatus(
            connected=reading.connected,
            transport=reading.transport,
            has_internet_capability=reading.has_internet_capability,
            signal_strength_raw=reading.signal_strength_raw,
            carrier_name=reading.carrier_name,
        )

    def check_connectivity(self, cancel_event: threading.Event | None = None) -> NetworkCheckResult:
        """Run one monitoring cycle.

        Args:
            cancel_event: Optional event that aborts probing (raises ProbeCancelled)

        Returns:
            Fresh NetworkCheckResult for this cycle
        """
        cycle_id = uuid.uuid4().hex[:12]
        status = self.read_status()

        logger.debug(
            "Status read: cycle_id=%s, connected=%s, transport=%s, internet=%s, "
            "signal_raw=%s, signal=%s, carrier=%s",
            cycle_id,
            status.connected,
            status.transport.name,
            status.has_internet_capability,
            status.signal_strength_raw,
            status.signal_quality.name,
            status.carrier_name,
        )

        probes = self.prober.probe(
            self.targets,
            attempts_per_target=self.settings.attempts_per_target,
            timeout_ms=self.settings.timeout_ms,
            interval_ms=self.settings.interval_ms,
            cancel_event=cancel_event,
        )

        verdict = classify(status, probes)
        breakdown = score_breakdown(status, probes)

        result = NetworkCheckResult(
            status=status,
            probes=tuple(probes),
            suspected=verdict.suspected,
            confidence=breakdown.score,
            rationale=verdict.rationale,
            cycle_id=cycle_id,
        )

        logger.debug(
            "Confidence terms: cycle_id=%s, network=%.2f, ping_failure=%.2f, "
            "packet_loss=%.2f, signal=%.2f, jitter=%.2f, raw=%.2f",
            cycle_id,
            breakdown.network,
            breakdown.ping_failure,
            breakdown.packet_loss,
            breakdown.signal,
            breakdown.jitter,
            breakdown.raw,
        )
        logger.info(
            "Cycle complete: cycle_id=%s, transport=%s, signal=%s, probes=%d, loss=%.2f, "
            "suspected=%s (rule %d: %s), confidence=%.2f, poor_signal=%s, confirmed_shutdown=%s",
            cycle_id,
            status.transport.name,
            status.signal_quality.name,
            len(probes),
            aggregate_packet_loss(probes),
            verdict.suspected,
            verdict.rule,
            verdict.rationale,
            result.confidence,
            result.is_poor_signal,
            result.is_confirmed_shutdown,
        )
        return result
