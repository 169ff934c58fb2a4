"""Signal quality classification from raw platform readings."""

from enum import Enum


class Transport(Enum):
    """Active network interface class."""

    WIFI = "WIFI"
    MOBILE = "MOBILE_DATA"
    ETHERNET = "ETHERNET"
    UNKNOWN = "UNKNOWN"


class SignalQuality(Enum):
    """Discrete radio signal quality tier."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    UNKNOWN = "UNKNOWN"


# Wi-Fi RSSI in dBm; a reading must be strictly above the bound
WIFI_THRESHOLDS_DBM = (
    (-30, SignalQuality.EXCELLENT),
    (-50, SignalQuality.GOOD),
    (-70, SignalQuality.FAIR),
)

# Cellular coarse level 0-4; a reading must be at least the bound
MOBILE_LEVEL_THRESHOLDS = (
    (4, SignalQuality.EXCELLENT),
    (3, SignalQuality.GOOD),
    (2, SignalQuality.FAIR),
)


def classify_signal(transport: Transport, signal_strength_raw: int | None) -> SignalQuality:
    """Map a raw signal reading to a quality tier (pure function).

    Wi-Fi readings are RSSI values in dBm, mobile readings are the platform's
    coarse 0-4 bar level. Anything below the lowest bound is POOR, including
    mobile level 1 and 0. Ethernet and unknown transports carry no radio
    signal and always classify as UNKNOWN, as does an absent reading.

    Args:
        transport: Active network transport
        signal_strength_raw: dBm (Wi-Fi) or level (mobile), or None if unavailable

    Returns:
        SignalQuality tier

    Examples:
        >>> classify_signal(Transport.WIFI, -45)
        <SignalQuality.GOOD: 'GOOD'>
        >>> classify_signal(Transport.MOBILE, 1)
        <SignalQuality.POOR: 'POOR'>
        >>> classify_signal(Transport.ETHERNET, -20)
        <SignalQuality.UNKNOWN: 'UNKNOWN'>
    """
    if signal_strength_raw is None:
        return SignalQuality.UNKNOWN

    if transport == Transport.WIFI:
        for bound, quality in WIFI_THRESHOLDS_DBM:
            if signal_strength_raw > bound:
                return quality
        return SignalQuality.POOR

    if transport == Transport.MOBILE:
        for bound, quality in MOBILE_LEVEL_THRESHOLDS:
            if signal_strength_raw >= bound:
                return quality
        return SignalQuality.POOR

    return SignalQuality.UNKNOWN
