"""Confidence scoring for shutdown suspicion."""

from dataclasses import dataclass
from typing import Sequence

from shutdowntracker.classifier import HIGH_JITTER_MS, aggregate_packet_loss, average_jitter_ms
from shutdowntracker.models import ConnectivityStatus, ProbeOutcome
from shutdowntracker.signal_quality import SignalQuality

NO_INTERNET_WEIGHT = 0.3
PING_FAILURE_WEIGHT = 0.3
PACKET_LOSS_WEIGHT = 0.2
HIGH_JITTER_BONUS = 0.1

SIGNAL_WEIGHTS = {
    SignalQuality.EXCELLENT: 0.2,
    SignalQuality.GOOD: 0.15,
    SignalQuality.FAIR: 0.1,
    SignalQuality.POOR: -0.3,
    SignalQuality.UNKNOWN: 0.05,
}


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Individual additive terms of a confidence score."""

    network: float
    ping_failure: float
    packet_loss: float
    signal: float
    jitter: float

    @property
    def raw(self) -> float:
        return self.network + self.ping_failure + self.packet_loss + self.signal + self.jitter

    @property
    def score(self) -> float:
        return min(1.0, max(0.0, self.raw))


def score_breakdown(
    status: ConnectivityStatus, probes: Sequence[ProbeOutcome]
) -> ConfidenceBreakdown:
    """Compute every scoring term without clamping."""
    quality = status.signal_quality

    network = NO_INTERNET_WEIGHT if status.connected and not status.has_internet_capability else 0.0

    ping_failure = 0.0
    if probes:
        failure_rate = 1.0 - sum(1 for p in probes if p.success) / len(probes)
        ping_failure = failure_rate * PING_FAILURE_WEIGHT

    packet_loss = aggregate_packet_loss(probes) * PACKET_LOSS_WEIGHT

    jitter = 0.0
    if average_jitter_ms(probes) > HIGH_JITTER_MS and quality in (
        SignalQuality.EXCELLENT,
        SignalQuality.GOOD,
    ):
        jitter = HIGH_JITTER_BONUS

    return ConfidenceBreakdown(
        network=network,
        ping_failure=ping_failure,
        packet_loss=packet_loss,
        signal=SIGNAL_WEIGHTS[quality],
        jitter=jitter,
    )


def confidence_score(status: ConnectivityStatus, probes: Sequence[ProbeOutcome]) -> float:
    """Additive confidence in [0, 1] that observed conditions indicate a shutdown.

    Independent of classify(); the two may disagree and callers use both.
    """
    return score_breakdown(status, probes).score
