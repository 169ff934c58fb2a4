"""Reachability collectors backed by the system ping command or TCP connects."""

import logging
import platform
import re
import socket
import subprocess
import time
from datetime import datetime
from math import ceil

from shutdowntracker.models import ProbeAttempt

logger = logging.getLogger(__name__)

_LESS_THAN_PATTERN = re.compile(r"time<(\d+)", re.IGNORECASE)
_LATENCY_PATTERN = re.compile(r"time\s*[=<]\s*(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)


def parse_ping_latency_ms(output: str) -> float | None:
    """Extract the reply time in ms from ping output, or None if there is none.

    Accepts the "time=12.3 ms" form printed by iputils and BSD ping and the
    "time=12ms" / "time<1ms" forms printed by Windows. A "time<N" reading
    is taken as N/2.

    >>> parse_ping_latency_ms("time<1ms")
    0.5
    """
    if not output:
        return None

    match = _LESS_THAN_PATTERN.search(output)
    if match:
        return float(match.group(1)) / 2.0

    match = _LATENCY_PATTERN.search(output)
    if match:
        try:
            return float(match.group(1))
        except (ValueError, IndexError):
            return None

    return None


def resolve_host(host: str) -> bool:
    """Return True if host resolves to at least one address."""
    if not host or not host.strip():
        return False
    try:
        return bool(socket.getaddrinfo(host, None))
    except (socket.gaierror, UnicodeError, OSError) as e:
        logger.debug("Resolution failed: host=%s, error=%s", host, e)
        return False


class PingCollector:
    """Collector that uses the OS ping command as its reachability check.

    A check succeeds only when ping exits zero and its output carries a
    reply time; anything else is a lost attempt. Only the English "time"
    keyword is recognised, so a localized Windows ping reports every attempt
    as lost; use TcpConnectCollector there.
    """

    def __init__(self, timeout_ms: int = 1000):
        """Initialize ping collector with a default timeout.

        Args:
            timeout_ms: Default time to wait for a reply in milliseconds,
                       used when generate_sample() is not given one.
        """
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        self.timeout_ms = timeout_ms
        self.system = platform.system()

        logger.debug(
            "PingCollector initialized: timeout_ms=%d, system=%s",
            timeout_ms,
            self.system,
        )

    def resolve(self, host: str) -> bool:
        return resolve_host(host)

    def generate_sample(self, host: str, timeout_ms: int | None = None) -> ProbeAttempt:
        """Send a single echo request to the host.

        Args:
            host: Target hostname or IP address
            timeout_ms: Reply timeout for this attempt (defaults to self.timeout_ms)

        Returns:
            ProbeAttempt with parsed reply time, or loss=True on any failure
        """
        timestamp = datetime.now()

        if not host or not host.strip():
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        if timeout_ms is None:
            timeout_ms = self.timeout_ms
        timeout_seconds = timeout_ms / 1000.0

        try:
            cmd = self._build_ping_command(host, timeout_ms)

            logger.debug("Executing ping: host=%s, timeout=%.1fs", host, timeout_seconds)

            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout_seconds + 0.5,
                shell=False,
            )

            if result.returncode != 0:
                logger.debug(
                    "Ping failed (non-zero returncode): host=%s, returncode=%d",
                    host,
                    result.returncode,
                )
                return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

            latency = parse_ping_latency_ms(result.stdout)

            if latency is None:
                logger.debug(
                    "Parse failed: host=%s, output_preview=%s",
                    host,
                    result.stdout[:100] if result.stdout else "(empty)",
                )
                return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

            logger.debug("Parsed latency: host=%s, latency=%.2fms", host, latency)
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=latency, loss=False)

        except subprocess.TimeoutExpired:
            logger.debug("Ping timeout: host=%s, timeout=%.1fs", host, timeout_seconds)
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)
        except Exception as e:
            # e.g. ping binary missing
            logger.warning("Ping error: host=%s, error=%s", host, str(e), exc_info=True)
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

    def _build_ping_command(self, host: str, timeout_ms: int | None = None) -> list[str]:
        """Build platform-specific single-echo ping command."""
        if timeout_ms is None:
            timeout_ms = self.timeout_ms

        if self.system == "Windows":
            return ["ping", "-n", "1", "-w", str(timeout_ms), host]

        elif self.system == "Linux":
            # -W takes whole seconds on iputils
            timeout_secs = max(1, ceil(timeout_ms / 1000.0))
            return ["ping", "-c", "1", "-W", str(timeout_secs), host]

        else:
            # macOS/BSD -W semantics differ; rely on subprocess timeout
            return ["ping", "-c", "1", host]


class TcpConnectCollector:
    """Collector that treats a completed TCP handshake as a reply.

    Used where ICMP is unavailable (no ping binary, unprivileged sandbox).
    Port 53 answers on the default public resolver targets.
    """

    def __init__(self, port: int = 53, timeout_ms: int = 1000):
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if not 0 < port < 65536:
            raise ValueError("port must be in 1..65535")

        self.port = port
        self.timeout_ms = timeout_ms

    def resolve(self, host: str) -> bool:
        return resolve_host(host)

    def generate_sample(self, host: str, timeout_ms: int | None = None) -> ProbeAttempt:
        timestamp = datetime.now()

        if not host or not host.strip():
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        if timeout_ms is None:
            timeout_ms = self.timeout_ms

        start = time.perf_counter()
        try:
            with socket.create_connection((host, self.port), timeout=timeout_ms / 1000.0):
                pass
        except ConnectionRefusedError:
            # A reset still proves the host answered
            logger.debug("TCP connect refused (host reachable): host=%s, port=%d", host, self.port)
        except OSError as e:
            logger.debug("TCP connect failed: host=%s, port=%d, error=%s", host, self.port, e)
            return ProbeAttempt(ts=timestamp, host=host, latency_ms=None, loss=True)

        latency = (time.perf_counter() - start) * 1000.0
        return ProbeAttempt(ts=timestamp, host=host, latency_ms=round(latency, 2), loss=False)
