"""Platform connectivity providers."""

import logging
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from shutdowntracker.signal_quality import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformReading:
    """Raw network state as reported by the platform.

    Signal strength and carrier may be absent; that is not an error.
    """

    connected: bool
    transport: Transport = Transport.UNKNOWN
    has_internet_capability: bool = False
    signal_strength_raw: int | None = None
    carrier_name: str | None = None


class ConnectivityProvider(Protocol):
    """Protocol for reading the current platform network state."""

    def current_status(self) -> PlatformReading:
        ...


class StaticConnectivityProvider:
    """Provider that always returns the same reading."""

    def __init__(self, reading: PlatformReading):
        self.reading = reading

    def current_status(self) -> PlatformReading:
        return self.reading


def dns_check(host: str = "dns.google") -> Callable[[], bool]:
    """Build an internet-capability check that resolves a well-known name."""

    def check() -> bool:
        try:
            return bool(socket.getaddrinfo(host, 53))
        except OSError as e:
            logger.debug("Internet check failed: host=%s, error=%s", host, e)
            return False

    return check


class LinuxConnectivityProvider:
    """Reads network state from Linux procfs and sysfs.

    - Connected: a non-loopback interface reports operstate "up".
    - Transport: taken from the default-route interface. A ``wireless``
      directory marks Wi-Fi, ``ww*`` names mark mobile broadband, anything
      else is ethernet.
    - Signal: Wi-Fi link level in dBm from /proc/net/wireless. Mobile
      modems expose no level here, so mobile signal stays absent.
    - Internet capability: a default route exists and the internet check
      passes.

    Carrier names are not available from procfs and are left absent.
    """

    def __init__(
        self,
        root: Path | str = "/",
        internet_check: Callable[[], bool] | None = None,
    ):
        self.root = Path(root)
        self.internet_check = internet_check if internet_check is not None else dns_check()

    def current_status(self) -> PlatformReading:
        up_interfaces = self._up_interfaces()
        default_iface = self._default_route_interface()

        if not up_interfaces and default_iface is None:
            return PlatformReading(connected=False)

        iface = default_iface if default_iface is not None else up_interfaces[0]
        transport = self._transport_for(iface)
        signal = self._wifi_level_dbm(iface) if transport == Transport.WIFI else None

        has_internet = False
        if default_iface is not None:
            try:
                has_internet = bool(self.internet_check())
            except Exception as e:
                logger.warning("Internet check error: %s", e, exc_info=True)

        return PlatformReading(
            connected=True,
            transport=transport,
            has_internet_capability=has_internet,
            signal_strength_raw=signal,
            carrier_name=None,
        )

    def _net_class(self) -> Path:
        return self.root / "sys" / "class" / "net"

    def _up_interfaces(self) -> list[str]:
        net = self._net_class()
        if not net.is_dir():
            return []

        up = []
        for entry in sorted(net.iterdir()):
            if entry.name == "lo":
                continue
            state = self._read_text(entry / "operstate")
            if state == "up":
                up.append(entry.name)
        return up

    def _default_route_interface(self) -> str | None:
        """Return the interface carrying the IPv4 default route, if any."""
        route = self._read_text(self.root / "proc" / "net" / "route")
        if not route:
            return None

        for line in route.splitlines()[1:]:
            fields = line.split()
            if len(fields) >= 2 and fields[1] == "00000000":
                return fields[0]
        return None

    def _transport_for(self, iface: str) -> Transport:
        if (self._net_class() / iface / "wireless").is_dir():
            return Transport.WIFI
        if iface.startswith("ww"):
            return Transport.MOBILE
        return Transport.ETHERNET

    def _wifi_level_dbm(self, iface: str) -> int | None:
        """Parse the link level column of /proc/net/wireless for iface."""
        wireless = self._read_text(self.root / "proc" / "net" / "wireless")
        if not wireless:
            return None

        # Two header lines, then "iface: status link level noise ..."
        for line in wireless.splitlines()[2:]:
            name, _, rest = line.partition(":")
            if name.strip() != iface:
                continue
            fields = rest.split()
            if len(fields) < 3:
                return None
            try:
                return int(float(fields[2]))
            except ValueError:
                return None
        return None

    @staticmethod
    def _read_text(path: Path) -> str | None:
        try:
            return path.read_text().strip()
        except OSError:
            return None
