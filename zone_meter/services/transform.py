"""Join enumerated zones with their network and disk usage."""

import copy
from typing import Dict, List, Optional

from zone_meter.models import (
    SCHEMA_VERSION,
    DiskDatasetSample,
    Instance,
    InstanceRegistry,
    NetworkUsageSample,
    Snapshot,
)
from zone_meter.services.disk_usage import DiskUsage
from zone_meter.services.network_usage import NetworkUsage


def build_snapshot(
    instance: Instance,
    network_usage: Optional[Dict[str, NetworkUsageSample]] = None,
    disk_usage: Optional[Dict[str, DiskDatasetSample]] = None,
) -> Snapshot:
    """
    Build the emitted record of one zone.

    The zone config must carry ``name`` and ``zonepath``; a config without
    them raises KeyError.
    """
    config = copy.deepcopy(instance.config)
    return Snapshot(
        zonename=config["name"],
        zonepath=config["zonepath"],
        uuid=config["name"],
        os_uuid=instance.os_uuid,
        status=instance.status,
        config=config,
        network_usage=dict(network_usage or {}),
        disk_usage=dict(disk_usage or {}),
        timestamp=instance.timestamp,
        v=SCHEMA_VERSION,
    )


def build_snapshots(
    registry: InstanceRegistry, network: NetworkUsage, disk: DiskUsage
) -> List[Snapshot]:
    """Build one snapshot per registered zone."""
    return [
        build_snapshot(instance, network.get(uuid), disk.get(uuid))
        for uuid, instance in registry.instances.items()
    ]
