"""Tests for environment-driven configuration."""

import pytest

from shutdowntracker.config import TrackerConfig
from shutdowntracker.models import Location
from shutdowntracker.monitor import DEFAULT_TARGETS, ProbeSettings


class TestFromEnv:
    def test_defaults(self):
        config = TrackerConfig.from_env({})

        assert config.targets == DEFAULT_TARGETS
        assert config.probe == ProbeSettings(attempts_per_target=3, timeout_ms=5000, interval_ms=1000)
        assert config.interval_s == 1800
        assert config.status_interval_s == 0
        assert config.threshold == 0.7
        assert config.api_url == ""
        assert config.collector == "ping"
        assert config.location_mode == "ip"
        assert config.static_location is None

    def test_overrides(self):
        config = TrackerConfig.from_env(
            {
                "TRACKER_TARGETS": " 9.9.9.9, example.org ,",
                "TRACKER_ATTEMPTS": "5",
                "TRACKER_TIMEOUT_MS": "2000",
                "TRACKER_PROBE_INTERVAL_MS": "0",
                "TRACKER_INTERVAL_S": "60",
                "TRACKER_STATUS_INTERVAL_S": "10",
                "TRACKER_THRESHOLD": "0.8",
                "TRACKER_API_URL": " https://api.example.org ",
                "TRACKER_COLLECTOR": "TCP",
                "TRACKER_LOCATION": "none",
            }
        )

        assert config.targets == ("9.9.9.9", "example.org")
        assert config.probe == ProbeSettings(attempts_per_target=5, timeout_ms=2000, interval_ms=0)
        assert config.interval_s == 60
        assert config.status_interval_s == 10
        assert config.threshold == 0.8
        assert config.api_url == "https://api.example.org"
        assert config.collector == "tcp"
        assert config.location_mode == "none"

    def test_static_location(self):
        config = TrackerConfig.from_env(
            {
                "TRACKER_LOCATION": "static",
                "TRACKER_LAT": "28.61",
                "TRACKER_LON": "77.21",
                "TRACKER_DISTRICT": "New Delhi",
            }
        )

        assert config.static_location == Location(
            district="New Delhi", state="Unknown", latitude=28.61, longitude=77.21
        )

    def test_static_mode_requires_coordinates(self):
        with pytest.raises(ValueError, match="TRACKER_LAT"):
            TrackerConfig.from_env({"TRACKER_LOCATION": "static"})

    def test_non_numeric_value_names_variable(self):
        with pytest.raises(ValueError, match="TRACKER_ATTEMPTS"):
            TrackerConfig.from_env({"TRACKER_ATTEMPTS": "three"})
        with pytest.raises(ValueError, match="TRACKER_THRESHOLD"):
            TrackerConfig.from_env({"TRACKER_THRESHOLD": "high"})

    def test_blank_targets_fall_back_to_defaults(self):
        assert TrackerConfig.from_env({"TRACKER_TARGETS": "  "}).targets == DEFAULT_TARGETS


class TestValidation:
    @pytest.mark.parametrize(
        "env",
        [
            {"TRACKER_TARGETS": ",,"},
            {"TRACKER_ATTEMPTS": "0"},
            {"TRACKER_TIMEOUT_MS": "0"},
            {"TRACKER_PROBE_INTERVAL_MS": "-1"},
            {"TRACKER_INTERVAL_S": "0"},
            {"TRACKER_STATUS_INTERVAL_S": "-5"},
            {"TRACKER_THRESHOLD": "1.2"},
            {"TRACKER_COLLECTOR": "carrier-pigeon"},
            {"TRACKER_LOCATION": "gps"},
        ],
    )
    def test_invalid_settings_rejected(self, env):
        with pytest.raises(ValueError):
            TrackerConfig.from_env(env)

    def test_direct_construction_validates(self):
        with pytest.raises(ValueError, match="probe target"):
            TrackerConfig(targets=())
