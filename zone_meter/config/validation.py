"""Configuration validation service."""

import os
from pathlib import Path
from typing import Optional

from zone_meter.config.settings import Settings
from zone_meter.logging_config import get_logger

logger = get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            suggestion: Optional suggestion for fixing the issue
        """
        self.message = message
        self.suggestion = suggestion
        full_message = message
        if suggestion:
            full_message = f"{message}\n\nSuggestion: {suggestion}"
        super().__init__(full_message)


def validate_configuration(settings: Settings) -> None:
    """
    Validate agent configuration on startup.

    Checks that the OS tools and zone files the accessors depend on are
    present, and that the log directory is usable.

    Raises:
        ConfigurationError: If any validation fails
    """
    logger.info("Validating configuration...")

    errors = []

    try:
        validate_accessor_paths(settings)
        logger.debug("Accessor paths validated")
    except ConfigurationError as e:
        errors.append(str(e))

    try:
        validate_log_directory(settings)
        logger.debug("Log directory validated")
    except ConfigurationError as e:
        errors.append(str(e))

    if errors:
        error_message = "Configuration validation failed:\n\n" + "\n\n".join(
            f"  - {error}" for error in errors
        )
        raise ConfigurationError(
            error_message,
            suggestion="Please review the errors above and fix the configuration issues before starting the agent.",
        )

    logger.info("Configuration validation passed")


def validate_accessor_paths(settings: Settings) -> None:
    """
    Validate that the zone, kstat and zfs tools are available.

    Raises:
        ConfigurationError: If a binary is missing or not executable, or a zone file is missing
    """
    missing = []
    for name, path in (
        ("zoneadm_path", settings.zoneadm_path),
        ("kstat_path", settings.kstat_path),
        ("zfs_path", settings.zfs_path),
    ):
        if not path.exists() or not os.access(path, os.X_OK):
            missing.append(f"{name}={path}")

    for name, path in (
        ("zones_index_path", settings.zones_index_path),
        ("zones_config_dir", settings.zones_config_dir),
    ):
        if not path.exists():
            missing.append(f"{name}={path}")

    if missing:
        raise ConfigurationError(
            f"Required OS accessors are unavailable: {', '.join(missing)}",
            suggestion=(
                "Run the agent in the global zone of a SmartOS host, or point the settings "
                "at the correct locations (e.g. ZONE_METER_ZFS_PATH=/sbin/zfs)"
            ),
        )


def validate_log_directory(settings: Settings) -> None:
    """
    Validate the log file directory exists and is writable.

    Raises:
        ConfigurationError: If log directory is invalid
    """
    if settings.log_file is None:
        return

    log_dir = Path(settings.log_file).parent

    if not log_dir.exists():
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created log directory: %s", log_dir)
        except (OSError, PermissionError) as e:
            raise ConfigurationError(
                f"Cannot create log directory '{log_dir}': {e}",
                suggestion=(
                    f"Create the directory manually: mkdir -p {log_dir}\n"
                    f"Or set ZONE_METER_LOG_FILE to a writable path"
                ),
            ) from e

    if not os.access(log_dir, os.W_OK):
        raise ConfigurationError(
            f"Log directory '{log_dir}' is not writable",
            suggestion=f"Fix permissions with: chmod 755 {log_dir}",
        )
