"""Configuration for the shutdown tracker, read from environment variables.

Environment Variables:
    TRACKER_TARGETS: Comma-separated probe hosts (default: 8.8.8.8,1.1.1.1,208.67.222.222)
    TRACKER_ATTEMPTS: Checks per target per cycle (default: 3)
    TRACKER_TIMEOUT_MS: Per-check timeout (default: 5000)
    TRACKER_PROBE_INTERVAL_MS: Pause between checks of one target (default: 1000)
    TRACKER_INTERVAL_S: Service loop period (default: 1800)
    TRACKER_STATUS_INTERVAL_S: Status loop period, 0 disables it (default: 0)
    TRACKER_THRESHOLD: Confidence a suspicion must exceed to report (default: 0.7)
    TRACKER_API_URL: Report API base URL; empty logs reports instead (default: empty)
    TRACKER_COLLECTOR: ping, tcp or fake (default: ping)
    TRACKER_LOCATION: ip, static or none (default: ip)
    TRACKER_LAT, TRACKER_LON, TRACKER_DISTRICT, TRACKER_STATE: static location
"""

import os
from dataclasses import dataclass, field
from typing import Mapping

from shutdowntracker.models import Location
from shutdowntracker.monitor import DEFAULT_TARGETS, ProbeSettings

COLLECTORS = ("ping", "tcp", "fake")
LOCATION_MODES = ("ip", "static", "none")


@dataclass(frozen=True)
class TrackerConfig:
    """Validated tracker settings. Invalid values raise ValueError on construction."""

    targets: tuple[str, ...] = DEFAULT_TARGETS
    probe: ProbeSettings = field(default_factory=ProbeSettings)
    interval_s: int = 1800
    status_interval_s: int = 0
    threshold: float = 0.7
    api_url: str = ""
    collector: str = "ping"
    location_mode: str = "ip"
    static_location: Location | None = None

    def __post_init__(self):
        if not self.targets:
            raise ValueError("at least one probe target is required")
        if self.probe.attempts_per_target < 1:
            raise ValueError("attempts per target must be at least 1")
        if self.probe.timeout_ms <= 0:
            raise ValueError("probe timeout must be positive")
        if self.probe.interval_ms < 0:
            raise ValueError("probe interval cannot be negative")
        if self.interval_s <= 0:
            raise ValueError("monitoring interval must be positive")
        if self.status_interval_s < 0:
            raise ValueError("status interval cannot be negative")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")
        if self.collector not in COLLECTORS:
            raise ValueError(f"collector must be one of {', '.join(COLLECTORS)}")
        if self.location_mode not in LOCATION_MODES:
            raise ValueError(f"location mode must be one of {', '.join(LOCATION_MODES)}")
        if self.location_mode == "static" and self.static_location is None:
            raise ValueError("static location mode requires TRACKER_LAT and TRACKER_LON")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TrackerConfig":
        """Build a config from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ

        targets_text = env.get("TRACKER_TARGETS", "")
        targets = tuple(t.strip() for t in targets_text.split(",") if t.strip())
        if not targets_text.strip():
            targets = DEFAULT_TARGETS

        probe = ProbeSettings(
            attempts_per_target=_int(env, "TRACKER_ATTEMPTS", 3),
            timeout_ms=_int(env, "TRACKER_TIMEOUT_MS", 5000),
            interval_ms=_int(env, "TRACKER_PROBE_INTERVAL_MS", 1000),
        )

        static_location = None
        if env.get("TRACKER_LAT") and env.get("TRACKER_LON"):
            static_location = Location(
                district=env.get("TRACKER_DISTRICT", "Unknown") or "Unknown",
                state=env.get("TRACKER_STATE", "Unknown") or "Unknown",
                latitude=_float(env, "TRACKER_LAT", 0.0),
                longitude=_float(env, "TRACKER_LON", 0.0),
            )

        return cls(
            targets=targets,
            probe=probe,
            interval_s=_int(env, "TRACKER_INTERVAL_S", 1800),
            status_interval_s=_int(env, "TRACKER_STATUS_INTERVAL_S", 0),
            threshold=_float(env, "TRACKER_THRESHOLD", 0.7),
            api_url=env.get("TRACKER_API_URL", "").strip(),
            collector=env.get("TRACKER_COLLECTOR", "ping").strip().lower() or "ping",
            location_mode=env.get("TRACKER_LOCATION", "ip").strip().lower() or "ip",
            static_location=static_location,
        )


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
