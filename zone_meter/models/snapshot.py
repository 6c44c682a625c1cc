"""Snapshot model: the per-zone record emitted every cycle."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from zone_meter.models.usage import DiskDatasetSample, NetworkUsageSample
from zone_meter.models.zone import ZoneStatus

SCHEMA_VERSION = "1"


class Snapshot(BaseModel):
    """Point-in-time usage record of one zone."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "zonename": "7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b",
                "zonepath": "/zones/7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b",
                "uuid": "7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b",
                "os_uuid": "2f0e4b1a-5d6c-4e7f-8a9b-0c1d2e3f4a5b",
                "status": "running",
                "config": {"name": "7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b"},
                "network_usage": {
                    "net0": {
                        "sent_bytes": 1048576,
                        "received_bytes": 2097152,
                        "counter_start": "2024-01-15T10:00:00Z",
                    }
                },
                "disk_usage": {
                    "zones/7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b": {
                        "used": 536870912,
                        "available": 10737418240,
                        "referenced": 268435456,
                        "type": "filesystem",
                        "mountpoint": "/zones/7b8d1c1e-3c7a-4c8e-9a3b-0f1f2e3d4c5b",
                        "quota": 10737418240,
                        "origin": "-",
                        "volsize": "-",
                    }
                },
                "timestamp": "2024-01-15T10:30:05Z",
                "v": "1",
            }
        },
    )

    zonename: str = Field(..., description="Zone name")
    zonepath: str = Field(..., description="Zone root path")
    uuid: str = Field(..., description="Zone identifier")
    os_uuid: str = Field(default="", description="OS-level zone UUID")
    status: ZoneStatus = Field(..., description="Lifecycle state")
    config: Dict[str, Any] = Field(default_factory=dict, description="Zone definition")
    network_usage: Dict[str, NetworkUsageSample] = Field(
        default_factory=dict, description="Counters keyed by link name"
    )
    disk_usage: Dict[str, DiskDatasetSample] = Field(
        default_factory=dict, description="Dataset properties keyed by dataset name"
    )
    timestamp: datetime = Field(..., description="When the zone was captured")
    v: str = Field(default=SCHEMA_VERSION, description="Schema version")
