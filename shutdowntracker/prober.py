"""Sequential multi-target reachability prober."""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Sequence

from shutdowntracker.collector import Collector
from shutdowntracker.models import ProbeOutcome

logger = logging.getLogger(__name__)


class ProbeCancelled(Exception):
    """Raised when a probe run is cancelled at a suspension point."""


class Prober:
    """Runs repeated reachability checks against an ordered list of targets.

    Attempts are strictly sequential: at most one check is in flight at a
    time, and the wait between attempts is an interruptible
    ``threading.Event.wait`` so a cancelled cycle stops at the next attempt
    boundary. A failed or raising attempt is recorded as lost and never
    aborts the batch.
    """

    def __init__(self, collector: Collector, clock: Callable[[], float] = time.perf_counter):
        """Initialize prober.

        Args:
            collector: Reachability collector used for each attempt
            clock: Monotonic clock in seconds, used to time attempts
        """
        self.collector = collector
        self._clock = clock

    def probe(
        self,
        targets: Sequence[str],
        attempts_per_target: int = 3,
        timeout_ms: int = 5000,
        interval_ms: int = 1000,
        cancel_event: threading.Event | None = None,
    ) -> list[ProbeOutcome]:
        """Probe every target in order.

        Args:
            targets: Hosts to probe; an empty sequence yields an empty result
            attempts_per_target: Checks per target (>= 1)
            timeout_ms: Per-attempt reply timeout (> 0)
            interval_ms: Pause between attempts within a target (>= 0)
            cancel_event: Set to abandon the run; raises ProbeCancelled

        Returns:
            One ProbeOutcome per target, in input order
        """
        if attempts_per_target < 1:
            raise ValueError("attempts_per_target must be at least 1")
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if interval_ms < 0:
            raise ValueError("interval_ms cannot be negative")

        if cancel_event is None:
            cancel_event = threading.Event()

        return [
            self._probe_target(host, attempts_per_target, timeout_ms, interval_ms, cancel_event)
            for host in targets
        ]

    def _probe_target(
        self,
        host: str,
        attempts: int,
        timeout_ms: int,
        interval_ms: int,
        cancel_event: threading.Event,
    ) -> ProbeOutcome:
        sampled_at = datetime.now()

        if cancel_event.is_set():
            raise ProbeCancelled(host)

        if not self._resolves(host):
            # No partial credit for an unresolvable name
            logger.debug("Target unresolvable: host=%s, attempts=%d", host, attempts)
            return ProbeOutcome(target=host, attempts=attempts, sampled_at=sampled_at)

        latencies = []
        for attempt in range(1, attempts + 1):
            if cancel_event.is_set():
                raise ProbeCancelled(host)

            latency = self._attempt(host, timeout_ms)
            if latency is not None:
                latencies.append(latency)

            logger.debug(
                "Probe attempt: host=%s, attempt=%d/%d, latency=%s",
                host,
                attempt,
                attempts,
                "lost" if latency is None else f"{latency:.2f}ms",
            )

            if attempt < attempts and cancel_event.wait(interval_ms / 1000.0):
                raise ProbeCancelled(host)

        outcome = ProbeOutcome(
            target=host, attempts=attempts, latencies_ms=tuple(latencies), sampled_at=sampled_at
        )
        logger.debug(
            "Probe complete: host=%s, sent=%d, received=%d, loss=%.2f, min=%s, avg=%s, max=%s, jitter=%s",
            host,
            outcome.attempts,
            outcome.successes,
            outcome.packet_loss,
            outcome.min_ms,
            outcome.avg_ms,
            outcome.max_ms,
            outcome.jitter_ms,
        )
        return outcome

    def _resolves(self, host: str) -> bool:
        try:
            return bool(self.collector.resolve(host))
        except Exception as e:
            logger.warning("Resolution error: host=%s, error=%s", host, e, exc_info=True)
            return False

    def _attempt(self, host: str, timeout_ms: int) -> float | None:
        """Run one check and return its wall-clock latency, or None if lost."""
        start = self._clock()
        try:
            sample = self.collector.generate_sample(host, timeout_ms)
        except Exception as e:
            logger.warning("Probe attempt error: host=%s, error=%s", host, e, exc_info=True)
            return None
        elapsed_ms = (self._clock() - start) * 1000.0

        if sample.loss:
            return None

        if elapsed_ms > timeout_ms:
            logger.debug(
                "Reply after timeout: host=%s, elapsed=%.2fms, timeout=%dms",
                host,
                elapsed_ms,
                timeout_ms,
            )
            return None

        return elapsed_ms
