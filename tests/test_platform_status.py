"""Tests for the Linux procfs/sysfs connectivity provider."""

import pytest

from shutdowntracker.platform_status import (
    LinuxConnectivityProvider,
    PlatformReading,
    StaticConnectivityProvider,
)
from shutdowntracker.signal_quality import Transport

ROUTE_HEADER = "Iface\tDestination\tGateway\tFlags\tRefCnt\tUse\tMetric\tMask\tMTU\tWindow\tIRTT"
WIRELESS_HEADER = (
    "Inter-| sta-|   Quality        |   Discarded packets               | Missed | WE\n"
    " face | tus | link level noise |  nwid  crypt   frag  retry   misc | beacon | 22"
)


class FakeRoot:
    """Builds a minimal sysfs/procfs tree under tmp_path."""

    def __init__(self, path):
        self.path = path
        (path / "sys" / "class" / "net").mkdir(parents=True)
        (path / "proc" / "net").mkdir(parents=True)

    def interface(self, name, state="up", wireless=False):
        iface = self.path / "sys" / "class" / "net" / name
        iface.mkdir()
        (iface / "operstate").write_text(state + "\n")
        if wireless:
            (iface / "wireless").mkdir()

    def default_route(self, iface):
        (self.path / "proc" / "net" / "route").write_text(
            f"{ROUTE_HEADER}\n"
            f"{iface}\t00000000\t0101A8C0\t0003\t0\t0\t600\t00000000\t0\t0\t0\n"
            f"{iface}\t0001A8C0\t00000000\t0001\t0\t0\t600\t00FFFFFF\t0\t0\t0\n"
        )

    def wireless_level(self, iface, level):
        (self.path / "proc" / "net" / "wireless").write_text(
            f"{WIRELESS_HEADER}\n{iface}: 0000   45.  {level}.  -256        0      0      0      0     12        0\n"
        )


@pytest.fixture
def root(tmp_path):
    return FakeRoot(tmp_path)


def provider(root, internet=True):
    return LinuxConnectivityProvider(root=root.path, internet_check=lambda: internet)


class TestLinuxConnectivityProvider:
    def test_no_interfaces_is_disconnected(self, root):
        assert provider(root).current_status() == PlatformReading(connected=False)

    def test_loopback_ignored(self, root):
        root.interface("lo", state="unknown")
        assert provider(root).current_status().connected is False

    def test_wifi_with_signal(self, root):
        root.interface("wlan0", wireless=True)
        root.default_route("wlan0")
        root.wireless_level("wlan0", -62)

        reading = provider(root).current_status()

        assert reading.connected is True
        assert reading.transport == Transport.WIFI
        assert reading.signal_strength_raw == -62
        assert reading.has_internet_capability is True
        assert reading.carrier_name is None

    def test_wifi_without_wireless_stats(self, root):
        root.interface("wlan0", wireless=True)
        root.default_route("wlan0")

        assert provider(root).current_status().signal_strength_raw is None

    def test_ethernet(self, root):
        root.interface("eth0")
        root.default_route("eth0")

        reading = provider(root).current_status()

        assert reading.transport == Transport.ETHERNET
        assert reading.signal_strength_raw is None

    def test_mobile_broadband(self, root):
        root.interface("wwan0")
        root.default_route("wwan0")

        assert provider(root).current_status().transport == Transport.MOBILE

    def test_default_route_interface_wins(self, root):
        root.interface("eth0")
        root.interface("wlan0", wireless=True)
        root.default_route("wlan0")

        assert provider(root).current_status().transport == Transport.WIFI

    def test_no_default_route_means_no_internet(self, root):
        root.interface("eth0")

        reading = provider(root, internet=True).current_status()

        assert reading.connected is True
        assert reading.has_internet_capability is False

    def test_failed_internet_check(self, root):
        root.interface("eth0")
        root.default_route("eth0")

        assert provider(root, internet=False).current_status().has_internet_capability is False

    def test_raising_internet_check(self, root):
        root.interface("eth0")
        root.default_route("eth0")

        def check():
            raise OSError("resolver unavailable")

        reading = LinuxConnectivityProvider(root=root.path, internet_check=check).current_status()

        assert reading.connected is True
        assert reading.has_internet_capability is False

    def test_down_interface_without_route(self, root):
        root.interface("eth0", state="down")
        assert provider(root).current_status().connected is False


def test_static_provider_returns_reading():
    reading = PlatformReading(connected=True, transport=Transport.WIFI, signal_strength_raw=-40)
    assert StaticConnectivityProvider(reading).current_status() is reading
