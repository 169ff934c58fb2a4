"""Collector abstraction for reachability checks."""

from typing import Protocol

from shutdowntracker.fake_collector import FakeCollector
from shutdowntracker.models import ProbeAttempt


class Collector(Protocol):
    """Protocol defining the interface for reachability collectors."""

    def resolve(self, host: str) -> bool:
        """Return True if the host name can be resolved to an address."""
        ...

    def generate_sample(self, host: str, timeout_ms: int) -> ProbeAttempt:
        """Perform one reachability check bounded by timeout_ms."""
        ...


class FakeCollectorAdapter:
    """Adapter that implements Collector protocol using FakeCollector."""

    def __init__(self, fake_collector: FakeCollector | None = None):
        """Initialize with optional FakeCollector instance."""
        if fake_collector is None:
            fake_collector = FakeCollector()
        self._fake_collector = fake_collector

    def resolve(self, host: str) -> bool:
        return self._fake_collector.resolve(host)

    def generate_sample(self, host: str, timeout_ms: int) -> ProbeAttempt:
        """Generate a sample using the underlying FakeCollector."""
        return self._fake_collector.generate_sample(host, timeout_ms)
