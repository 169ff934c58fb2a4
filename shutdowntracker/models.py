"""Data models for connectivity samples, check results and shutdown reports."""

import statistics
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from shutdowntracker.signal_quality import SignalQuality, Transport, classify_signal


class ShutdownStatus(Enum):
    """Lifecycle state of a shutdown report."""

    SUSPECTED = "suspected"
    CONFIRMED = "confirmed"
    FALSE_ALARM = "false_alarm"
    RESOLVED = "resolved"


@dataclass
class ProbeAttempt:
    """A single reachability check against one host."""

    ts: datetime
    host: str
    latency_ms: float | None  # None indicates no reply
    loss: bool

    def __post_init__(self):
        """Ensure consistency between latency_ms and loss fields."""
        if self.loss:
            self.latency_ms = None
        elif self.latency_ms is None:
            self.loss = True


@dataclass(frozen=True)
class ProbeOutcome:
    """Aggregated statistics for one round of attempts against a target.

    Only the raw samples are stored; every statistic is derived from
    ``latencies_ms`` so the outcome can never disagree with itself.
    """

    target: str
    attempts: int
    latencies_ms: tuple[float, ...] = ()
    sampled_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        object.__setattr__(self, "latencies_ms", tuple(self.latencies_ms))
        if len(self.latencies_ms) > self.attempts:
            raise ValueError("latencies_ms cannot hold more samples than attempts")

    @property
    def successes(self) -> int:
        return len(self.latencies_ms)

    @property
    def success(self) -> bool:
        return self.successes > 0

    @property
    def packet_loss(self) -> float:
        return (self.attempts - self.successes) / self.attempts

    @property
    def jitter_ms(self) -> float | None:
        """Population standard deviation of latencies, None below two samples."""
        if self.successes < 2:
            return None
        return statistics.pstdev(self.latencies_ms)

    @property
    def min_ms(self) -> float | None:
        return min(self.latencies_ms) if self.latencies_ms else None

    @property
    def max_ms(self) -> float | None:
        return max(self.latencies_ms) if self.latencies_ms else None

    @property
    def avg_ms(self) -> float | None:
        return statistics.fmean(self.latencies_ms) if self.latencies_ms else None


@dataclass(frozen=True)
class ConnectivityStatus:
    """Snapshot of the device's network state."""

    connected: bool
    transport: Transport
    has_internet_capability: bool
    signal_strength_raw: int | None = None
    carrier_name: str | None = None
    sampled_at: datetime = field(default_factory=datetime.now)

    @property
    def signal_quality(self) -> SignalQuality:
        # Always derived, never stored
        return classify_signal(self.transport, self.signal_strength_raw)


@dataclass(frozen=True)
class NetworkCheckResult:
    """Outcome of one monitoring cycle."""

    status: ConnectivityStatus
    probes: tuple[ProbeOutcome, ...]
    suspected: bool
    confidence: float
    rationale: str = ""
    cycle_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "probes", tuple(self.probes))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")

    @property
    def is_poor_signal(self) -> bool:
        return self.status.signal_quality == SignalQuality.POOR

    @property
    def is_confirmed_shutdown(self) -> bool:
        return self.suspected and not self.is_poor_signal


@dataclass(frozen=True)
class Location:
    """Best-effort device location."""

    district: str
    state: str
    latitude: float
    longitude: float


UNKNOWN_LOCATION = Location(district="Unknown", state="Unknown", latitude=0.0, longitude=0.0)


@dataclass(frozen=True)
class DeviceInfo:
    """Device metadata attached to a report."""

    os_version: str
    model: str
    carrier: str | None = None
    signal_strength_raw: int | None = None
    battery_level: int | None = None


@dataclass(frozen=True)
class ShutdownReport:
    """Structured report for a suspected shutdown, handed off for submission."""

    id: str
    created_at: datetime
    location: Location
    network_type: Transport
    device_info: DeviceInfo
    probes: tuple[ProbeOutcome, ...]
    signal_quality: SignalQuality
    status: ShutdownStatus = ShutdownStatus.SUSPECTED
    is_confirmed: bool = False
    user_confirmed: bool | None = None

    def __post_init__(self):
        object.__setattr__(self, "probes", tuple(self.probes))


@dataclass(frozen=True)
class SubmissionResult:
    """Result of handing a report (or status update) to the remote API."""

    success: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "SubmissionResult":
        return cls(success=True)

    @classmethod
    def failed(cls, reason: str) -> "SubmissionResult":
        return cls(success=False, reason=reason)
