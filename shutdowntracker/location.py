"""Best-effort geolocation providers."""

import json
import logging
import urllib.request
from typing import Callable, Protocol

from shutdowntracker.models import UNKNOWN_LOCATION, Location

logger = logging.getLogger(__name__)

IPINFO_URL = "https://ipinfo.io/json"


class LocationProvider(Protocol):
    """Protocol for a device location source; None means no fix."""

    def current_location(self) -> Location | None:
        ...


class StaticLocationProvider:
    """Provider for a fixed, configured location."""

    def __init__(self, location: Location):
        self.location = location

    def current_location(self) -> Location | None:
        return self.location


class IpGeolocationProvider:
    """Looks up an approximate location from the public IP address.

    Expects an ipinfo.io style JSON body with ``city``, ``region`` and
    ``loc`` ("lat,lon") fields. City maps to district, region to state.
    """

    def __init__(
        self,
        url: str = IPINFO_URL,
        timeout_s: float = 10.0,
        opener: Callable = urllib.request.urlopen,
    ):
        self.url = url
        self.timeout_s = timeout_s
        self._opener = opener

    def current_location(self) -> Location | None:
        req = urllib.request.Request(self.url, headers={"Accept": "application/json"})
        with self._opener(req, timeout=self.timeout_s) as response:
            data = json.loads(response.read().decode("utf-8"))

        loc = data.get("loc")
        if not loc:
            return None

        lat_text, _, lon_text = loc.partition(",")
        if not lat_text.strip() or not lon_text.strip():
            logger.debug("Malformed loc field: %r", loc)
            return None

        try:
            latitude, longitude = float(lat_text), float(lon_text)
        except ValueError:
            logger.debug("Non-numeric loc field: %r", loc)
            return None

        return Location(
            district=data.get("city") or "Unknown",
            state=data.get("region") or "Unknown",
            latitude=latitude,
            longitude=longitude,
        )


def resolve_location(provider: LocationProvider | None) -> Location:
    """Ask the provider for a location, falling back to UNKNOWN_LOCATION.

    Never raises: a missing provider, no fix, or a provider error all
    resolve to the "Unknown"/0.0 sentinel so reporting can proceed.
    """
    if provider is None:
        return UNKNOWN_LOCATION

    try:
        location = provider.current_location()
    except Exception as e:
        logger.warning("Location lookup failed: %s", e)
        return UNKNOWN_LOCATION

    if location is None:
        logger.info("Location unavailable, using sentinel")
        return UNKNOWN_LOCATION

    return location
