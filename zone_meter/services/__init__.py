"""Usage collection services."""

from zone_meter.services.disk_usage import DiskUsageCollector
from zone_meter.services.emitter import SnapshotEmitter
from zone_meter.services.instance_enumerator import InstanceEnumerator
from zone_meter.services.network_usage import NetworkUsageCollector
from zone_meter.services.snapshot_store import SnapshotStore
from zone_meter.services.usage_cycle import CycleError, UsageCycle
from zone_meter.services.usage_scheduler import UsageSchedulerService

__all__ = [
    "CycleError",
    "DiskUsageCollector",
    "InstanceEnumerator",
    "NetworkUsageCollector",
    "SnapshotEmitter",
    "SnapshotStore",
    "UsageCycle",
    "UsageSchedulerService",
]
