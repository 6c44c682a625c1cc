"""Configuration management for Zone Meter."""

from zone_meter.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
