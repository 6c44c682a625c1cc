"""Core data models for Zone Meter."""

from zone_meter.models.snapshot import SCHEMA_VERSION, Snapshot
from zone_meter.models.usage import (
    NOT_APPLICABLE,
    DiskDatasetSample,
    LinkStat,
    NetworkUsageSample,
)
from zone_meter.models.zone import (
    Instance,
    InstanceRegistry,
    ZoneListing,
    ZoneNotFound,
    ZoneStateError,
    ZoneStateFound,
    ZoneStateResult,
    ZoneStatus,
)

__all__ = [
    "DiskDatasetSample",
    "Instance",
    "InstanceRegistry",
    "LinkStat",
    "NOT_APPLICABLE",
    "NetworkUsageSample",
    "SCHEMA_VERSION",
    "Snapshot",
    "ZoneListing",
    "ZoneNotFound",
    "ZoneStateError",
    "ZoneStateFound",
    "ZoneStateResult",
    "ZoneStatus",
]
