"""Simulated reachability collector for testing and offline runs."""

import random
from datetime import datetime

from shutdowntracker.models import ProbeAttempt


class FakeCollector:
    """Generates simulated reachability checks.

    Hosts listed in ``unreachable_hosts`` never reply, hosts in
    ``unresolvable_hosts`` fail name resolution. Everything else replies
    with a jittered latency and occasional loss.
    """

    def __init__(
        self,
        seed: int | None = None,
        loss_probability: float = 0.02,
        unreachable_hosts: tuple[str, ...] = (),
        unresolvable_hosts: tuple[str, ...] = (),
    ):
        """Initialize with optional random seed for deterministic behavior."""
        # Isolated random instance so worker threads don't share state
        self._random = random.Random(seed)

        self.base_latency = 25.0  # ms
        self.latency_variance = 5.0
        self.spike_probability = 0.05
        self.spike_multiplier = 3.0
        self.loss_probability = loss_probability
        self.unreachable_hosts = frozenset(unreachable_hosts)
        self.unresolvable_hosts = frozenset(unresolvable_hosts)

    def resolve(self, host: str) -> bool:
        if not host or not host.strip():
            return False
        return host not in self.unresolvable_hosts

    def generate_sample(self, host: str, timeout_ms: int = 1000) -> ProbeAttempt:
        """Generate a single simulated check for the given host."""
        if not host or not host.strip():
            raise ValueError("Host cannot be empty")

        timestamp = datetime.now()

        if host in self.unreachable_hosts or host in self.unresolvable_hosts:
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        if self._random.random() < self.loss_probability:
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        if self._random.random() < self.spike_probability:
            latency = self.base_latency * self.spike_multiplier + self._random.gauss(
                0, self.latency_variance
            )
        else:
            latency = self.base_latency + self._random.gauss(0, self.latency_variance)

        latency = max(0.1, latency)

        # A reply slower than the timeout counts as lost
        if latency > timeout_ms:
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        return ProbeAttempt(ts=timestamp, host=host, latency_ms=round(latency, 2), loss=False)
