"""Logging configuration for Zone Meter."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from zone_meter.config import get_settings


def setup_logging(log_file: Optional[Path] = None) -> None:
    """Configure structured logging for the agent."""
    settings = get_settings()
    log_file = log_file or settings.log_file

    # Skip file logging when the directory cannot be created (e.g., in test environments)
    use_file_logging = False
    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            use_file_logging = True
        except PermissionError:
            use_file_logging = False

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, settings.log_level))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if use_file_logging and log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
            )
            file_handler.setLevel(getattr(logging, settings.log_level))
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except (PermissionError, OSError) as e:
            import warnings

            warnings.warn(
                f"Could not set up file logging to {log_file}: {e}. "
                "Continuing with console logging only.",
                UserWarning,
            )

    # Set levels for third-party libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
