"""Device metadata for shutdown reports."""

import logging
import platform
from pathlib import Path

from shutdowntracker.models import ConnectivityStatus, DeviceInfo

logger = logging.getLogger(__name__)


class DeviceInfoProvider:
    """Collects OS version, hardware model and battery level.

    Battery level comes from the first ``BAT*`` entry under
    /sys/class/power_supply and is absent on machines without one.
    """

    def __init__(self, sys_root: Path | str = "/sys"):
        self.sys_root = Path(sys_root)

    def device_info(self, status: ConnectivityStatus) -> DeviceInfo:
        return DeviceInfo(
            os_version=f"{platform.system()} {platform.release()}".strip(),
            model=self._model(),
            carrier=status.carrier_name,
            signal_strength_raw=status.signal_strength_raw,
            battery_level=self._battery_level(),
        )

    def _model(self) -> str:
        product = self._read_text(self.sys_root / "class" / "dmi" / "id" / "product_name")
        return product or platform.machine() or "Unknown"

    def _battery_level(self) -> int | None:
        supplies = self.sys_root / "class" / "power_supply"
        if not supplies.is_dir():
            return None

        for entry in sorted(supplies.glob("BAT*")):
            capacity = self._read_text(entry / "capacity")
            if capacity is None:
                continue
            try:
                return int(capacity)
            except ValueError:
                logger.debug("Unreadable battery capacity: %s=%r", entry.name, capacity)
        return None

    @staticmethod
    def _read_text(path: Path) -> str | None:
        try:
            return path.read_text().strip()
        except OSError:
            return None
