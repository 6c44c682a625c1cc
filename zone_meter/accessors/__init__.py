"""OS accessors the usage cycle reads from."""

from zone_meter.accessors.base import AccessorError, ZoneAccessors, ZoneNotFoundError
from zone_meter.accessors.smartos import SmartOSAccessors

__all__ = ["AccessorError", "SmartOSAccessors", "ZoneAccessors", "ZoneNotFoundError"]
