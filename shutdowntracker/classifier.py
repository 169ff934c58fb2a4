"""Shutdown suspicion classifier over a connectivity snapshot and probe outcomes."""

from dataclasses import dataclass
from typing import Sequence

from shutdowntracker.models import ConnectivityStatus, ProbeOutcome
from shutdowntracker.signal_quality import SignalQuality

HIGH_PACKET_LOSS = 0.5
HIGH_JITTER_MS = 100.0


@dataclass(frozen=True)
class Verdict:
    """Classifier decision with the rule that produced it."""

    suspected: bool
    rule: int
    rationale: str


def aggregate_packet_loss(probes: Sequence[ProbeOutcome]) -> float:
    """Lost attempts over all attempts across probes; 1.0 when nothing was sent."""
    sent = sum(p.attempts for p in probes)
    if sent == 0:
        return 1.0
    received = sum(p.successes for p in probes)
    return (sent - received) / sent


def average_jitter_ms(probes: Sequence[ProbeOutcome]) -> float:
    """Mean jitter over probes that have one; 0.0 when none do."""
    jitters = [p.jitter_ms for p in probes if p.jitter_ms is not None]
    if not jitters:
        return 0.0
    return sum(jitters) / len(jitters)


def all_probes_failed(probes: Sequence[ProbeOutcome]) -> bool:
    # No probes means unknown network state, not failure
    return bool(probes) and all(not p.success for p in probes)


def classify(status: ConnectivityStatus, probes: Sequence[ProbeOutcome]) -> Verdict:
    """Decide whether the observed state looks like an infrastructure shutdown.

    Rules are evaluated in order and the first match wins:

    1. Connected without internet capability, every probe failed, signal
       not POOR: suspected.
    2. Connected without internet capability, aggregate loss above 50%,
       signal EXCELLENT (throttling under strong signal): suspected.
    3. Every probe failed with EXCELLENT or GOOD signal: suspected.
    4. POOR signal explains the failure: not suspected.
    5. High jitter with POOR signal: not suspected. Rule 4 already covers
       every POOR case, so this only documents the intent.
    6. Otherwise: not suspected.
    """
    quality = status.signal_quality
    no_internet = status.connected and not status.has_internet_capability
    all_failed = all_probes_failed(probes)
    packet_loss = aggregate_packet_loss(probes)
    jitter = average_jitter_ms(probes)

    if no_internet and all_failed and quality != SignalQuality.POOR:
        return Verdict(True, 1, "connected without internet, all probes failed, signal not poor")

    if no_internet and packet_loss > HIGH_PACKET_LOSS and quality == SignalQuality.EXCELLENT:
        return Verdict(True, 2, "high packet loss under excellent signal, possible throttling")

    if all_failed and quality in (SignalQuality.EXCELLENT, SignalQuality.GOOD):
        return Verdict(True, 3, "all probes failed with good signal quality")

    if quality == SignalQuality.POOR:
        return Verdict(False, 4, "poor signal explains the failure")

    if jitter > HIGH_JITTER_MS and quality == SignalQuality.POOR:
        return Verdict(False, 5, "high jitter with poor signal")

    return Verdict(False, 6, "no shutdown indicators")


def is_shutdown_suspected(status: ConnectivityStatus, probes: Sequence[ProbeOutcome]) -> bool:
    return classify(status, probes).suspected
