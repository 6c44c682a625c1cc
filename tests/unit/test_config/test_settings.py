"""Unit tests for settings and configuration validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from zone_meter.config import Settings
from zone_meter.config.validation import (
    ConfigurationError,
    validate_accessor_paths,
    validate_configuration,
)


class TestSettings:
    """Test suite for Settings."""

    def test_defaults(self):
        """Test the default schedule is a one minute interval offset by five seconds."""
        settings = Settings()

        assert settings.interval_seconds == 60
        assert settings.schedule_offset_seconds == 5
        assert settings.cycle_timeout_seconds <= settings.interval_seconds
        assert settings.zfs_path == Path("/usr/sbin/zfs")

    def test_log_level_normalized(self):
        """Test log levels are upper-cased and validated."""
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"interval_seconds": 0},
            {"schedule_offset_seconds": -1},
            {"interval_seconds": 10, "schedule_offset_seconds": 10},
            {"interval_seconds": 10, "cycle_timeout_seconds": 11},
            {"max_concurrency": 0},
            {"command_timeout_seconds": 0},
            {"api_prefix": "api"},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test out-of-range and inconsistent values are rejected."""
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_cycle_timeout_follows_interval(self):
        """Test a short interval alone is valid and bounds the cycle deadline."""
        settings = Settings(interval_seconds=30)

        assert settings.cycle_timeout_seconds == 25
        assert Settings().cycle_timeout_seconds == 55

    def test_interval_from_environment_alone(self, monkeypatch):
        """Test setting only the interval in the environment is enough."""
        monkeypatch.setenv("ZONE_METER_INTERVAL_SECONDS", "20")

        settings = Settings()

        assert settings.interval_seconds == 20
        assert settings.cycle_timeout_seconds == 15

    def test_explicit_cycle_timeout_kept(self):
        """Test an explicit cycle deadline is used as given."""
        assert Settings(interval_seconds=30, cycle_timeout_seconds=30).cycle_timeout_seconds == 30

    def test_environment_override(self, monkeypatch):
        """Test ZONE_METER_ environment variables configure settings."""
        monkeypatch.setenv("ZONE_METER_INTERVAL_SECONDS", "300")
        monkeypatch.setenv("ZONE_METER_CYCLE_TIMEOUT_SECONDS", "120")

        settings = Settings()

        assert settings.interval_seconds == 300
        assert settings.cycle_timeout_seconds == 120

    def test_from_yaml_file(self, tmp_path, monkeypatch):
        """Test settings load from YAML with environment variables taking precedence."""
        config_path = tmp_path / "zone_meter.yaml"
        config_path.write_text(
            "interval_seconds: 120\nschedule_offset_seconds: 10\nlog_level: warning\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("ZONE_METER_SCHEDULE_OFFSET_SECONDS", "15")

        settings = Settings.from_file(config_path)

        assert settings.interval_seconds == 120
        assert settings.schedule_offset_seconds == 15
        assert settings.log_level == "WARNING"
        assert settings.config_file == config_path

    def test_from_file_errors(self, tmp_path):
        """Test missing files and unknown formats are reported."""
        with pytest.raises(FileNotFoundError):
            Settings.from_file(tmp_path / "missing.yaml")

        ini_path = tmp_path / "zone_meter.ini"
        ini_path.write_text("[meter]\n", encoding="utf-8")
        with pytest.raises(ValueError):
            Settings.from_file(ini_path)


class TestConfigurationValidation:
    """Test suite for startup validation."""

    def test_missing_tools_reported(self, tmp_path):
        """Test absent OS tools fail validation with a suggestion."""
        settings = Settings(
            zoneadm_path=tmp_path / "zoneadm",
            kstat_path=tmp_path / "kstat",
            zfs_path=tmp_path / "zfs",
            zones_index_path=tmp_path / "index",
            zones_config_dir=tmp_path,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            validate_accessor_paths(settings)

        assert "zoneadm_path" in str(exc_info.value)
        assert "zones_index_path" in str(exc_info.value)
        assert exc_info.value.suggestion

    def test_valid_host(self, tmp_path):
        """Test validation passes when every tool and zone file exists."""
        tools = {}
        for name in ("zoneadm", "kstat", "zfs"):
            path = tmp_path / name
            path.write_text("#!/bin/sh\n", encoding="utf-8")
            path.chmod(0o755)
            tools[f"{name}_path"] = path
        index = tmp_path / "index"
        index.write_text("global:installed:/\n", encoding="utf-8")

        settings = Settings(
            zones_index_path=index,
            zones_config_dir=tmp_path,
            log_file=tmp_path / "logs" / "zone-meter.log",
            **tools,
        )

        validate_configuration(settings)
        assert (tmp_path / "logs").is_dir()
