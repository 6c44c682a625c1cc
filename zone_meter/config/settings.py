"""Application settings and configuration."""

import os
import re
import socket
from pathlib import Path
from typing import Optional

import yaml  # type: ignore[import-untyped]
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Optional TOML support
try:
    import tomli
except ImportError:
    tomli = None  # type: ignore[assignment, misc]

ENV_PREFIX = "ZONE_METER_"


class Settings(BaseSettings):
    """Agent settings with environment variable and file support."""

    # Application
    app_name: str = Field(default="zone-meter", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, description="Log file size before rotation")
    log_backup_count: int = Field(default=5, description="Number of rotated log files to keep")

    # Server
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8090, description="Server port")
    api_prefix: str = Field(default="/api/v1", description="API prefix")

    # Scheduling
    scheduler_enabled: bool = Field(default=True, description="Run usage cycles on startup")
    interval_seconds: int = Field(default=60, description="Seconds between usage cycles")
    schedule_offset_seconds: int = Field(
        default=5, description="Offset of each cycle from the interval boundary, in seconds"
    )
    cycle_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Deadline for gathering and transforming one cycle "
        "(defaults to interval_seconds minus schedule_offset_seconds)",
    )
    max_concurrency: int = Field(
        default=10, description="Maximum concurrent per-zone accessor calls"
    )

    # OS accessors
    command_timeout_seconds: float = Field(
        default=30, description="Timeout for a single accessor command"
    )
    zoneadm_path: Path = Field(default=Path("/usr/sbin/zoneadm"), description="zoneadm binary")
    kstat_path: Path = Field(default=Path("/usr/bin/kstat"), description="kstat binary")
    zfs_path: Path = Field(default=Path("/usr/sbin/zfs"), description="zfs binary")
    zones_index_path: Path = Field(
        default=Path("/etc/zones/index"), description="Zone index file"
    )
    zones_config_dir: Path = Field(
        default=Path("/etc/zones"), description="Directory holding zone XML configs"
    )

    # File paths
    config_file: Optional[Path] = Field(
        default=None, description="Path to configuration file (YAML/TOML)"
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Validate API prefix format."""
        if not v.startswith("/"):
            raise ValueError(f"api_prefix must start with '/', got '{v}'")
        if not re.match(r"^/[a-zA-Z0-9/_-]*$", v):
            raise ValueError(
                "api_prefix contains invalid characters. Use only alphanumeric, '/', '_', and '-'"
            )
        return v.rstrip("/") if v != "/" else v

    @field_validator("interval_seconds", "max_concurrency")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate counts and intervals are positive."""
        if v <= 0:
            raise ValueError(f"value must be positive, got {v}")
        return v

    @field_validator("cycle_timeout_seconds", "command_timeout_seconds")
    @classmethod
    def validate_positive_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Validate timeouts are positive."""
        if v is not None and v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v

    @field_validator("schedule_offset_seconds")
    @classmethod
    def validate_offset(cls, v: int) -> int:
        """Validate schedule offset is not negative."""
        if v < 0:
            raise ValueError(f"schedule_offset_seconds must not be negative, got {v}")
        return v

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate host is a valid IP address or hostname."""
        if v in ("0.0.0.0", "127.0.0.1", "localhost", "*"):
            return v

        try:
            socket.inet_aton(v)
            return v
        except (socket.error, OSError):
            pass

        if not re.match(
            r"^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$",
            v,
        ):
            raise ValueError(
                f"host must be a valid IP address or hostname, got '{v}'. "
                f"Valid examples: '0.0.0.0', '127.0.0.1', 'localhost', or a valid hostname"
            )
        return v

    @model_validator(mode="after")
    def validate_cross_fields(self) -> "Settings":
        """Validate cross-field dependencies."""
        if self.schedule_offset_seconds >= self.interval_seconds:
            raise ValueError(
                f"schedule_offset_seconds ({self.schedule_offset_seconds}) must be "
                f"less than interval_seconds ({self.interval_seconds})"
            )
        if self.cycle_timeout_seconds is None:
            self.cycle_timeout_seconds = float(self.interval_seconds - self.schedule_offset_seconds)
        elif self.cycle_timeout_seconds > self.interval_seconds:
            raise ValueError(
                f"cycle_timeout_seconds ({self.cycle_timeout_seconds}) must not exceed "
                f"interval_seconds ({self.interval_seconds}) so a cycle ends before the next one"
            )
        return self

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from a YAML or TOML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix == ".yaml" or suffix == ".yml":
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ValueError(f"Error parsing YAML file: {exc}") from exc
        elif suffix == ".toml":
            if tomli is None:
                raise ImportError(
                    "TOML support requires 'tomli' package. Install with: pip install tomli"
                )
            with open(config_path, "rb") as f:
                config_data = tomli.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {suffix}")

        # Environment variables win over the file
        env_overrides = {}
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                config_key = key.replace(ENV_PREFIX, "").lower()
                env_overrides[config_key] = value

        if config_data:
            config_data.update(env_overrides)
            config_data["config_file"] = config_path
            return cls(**config_data)  # type: ignore[arg-type]
        else:
            return cls(config_file=config_path, **env_overrides)  # type: ignore[arg-type]


# Module-level settings cache (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        config_paths = [
            Path("zone_meter.yaml"),
            Path("zone_meter.yml"),
            Path("zone_meter.toml"),
            Path("config/zone_meter.yaml"),
            Path("config/zone_meter.yml"),
            Path("config/zone_meter.toml"),
        ]

        config_file = None
        for path in config_paths:
            if path.exists():
                config_file = path
                break

        if config_file:
            _settings = Settings.from_file(config_file)
        else:
            _settings = Settings()

    assert _settings is not None, "Settings should be initialized"
    return _settings
