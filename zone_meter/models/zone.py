"""Zone models: enumeration results, instances and the per-cycle registry."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field


class ZoneStatus(str, Enum):
    """Lifecycle state of a zone as reported by zoneadm."""

    CONFIGURED = "configured"
    INCOMPLETE = "incomplete"
    INSTALLED = "installed"
    READY = "ready"
    MOUNTED = "mounted"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    DOWN = "down"


class ZoneListing(BaseModel):
    """One entry of the host's zone index."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Zone name")
    uuid: str = Field(default="", description="OS-level zone UUID")
    zonepath: str = Field(..., description="Zone root path")


class ZoneStateFound(BaseModel):
    """Zone exists and reported its state."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: ZoneStatus


class ZoneNotFound(BaseModel):
    """Zone is no longer configured (destroyed since it was listed)."""

    model_config = ConfigDict(frozen=True)

    name: str


class ZoneStateError(BaseModel):
    """State lookup failed for a reason other than the zone being gone."""

    model_config = ConfigDict(frozen=True)

    name: str
    message: str


ZoneStateResult = Union[ZoneStateFound, ZoneNotFound, ZoneStateError]


class Instance(BaseModel):
    """A zone observed during one usage cycle."""

    model_config = ConfigDict(frozen=True)

    uuid: str = Field(..., description="Stable identifier, equal to the zone name")
    os_uuid: str = Field(default="", description="Secondary OS-level identifier")
    zonepath: str = Field(..., description="Zone root path, e.g. /zones/<uuid>")
    dataset: str = Field(..., description="Zone root dataset (zonepath without leading '/')")
    status: ZoneStatus = Field(..., description="Lifecycle state at enumeration time")
    config: Dict[str, Any] = Field(default_factory=dict, description="Zone definition")
    timestamp: datetime = Field(..., description="When the zone was enumerated")

    @property
    def pool(self) -> str:
        """Storage pool holding the zone root, the first segment of the dataset."""
        return self.dataset.split("/", 1)[0]


class InstanceRegistry(BaseModel):
    """Instances of one cycle with their dataset cross-reference tables."""

    model_config = ConfigDict(frozen=True)

    instances: Dict[str, Instance] = Field(default_factory=dict)
    datasets_to_path: Dict[str, str] = Field(default_factory=dict)
    paths_to_zone: Dict[str, str] = Field(default_factory=dict)
    zones_to_dataset: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_instances(cls, instances: List[Instance]) -> "InstanceRegistry":
        """Build a registry and its lookup tables from enumerated instances."""
        registry: Dict[str, Any] = {
            "instances": {},
            "datasets_to_path": {},
            "paths_to_zone": {},
            "zones_to_dataset": {},
        }
        for instance in instances:
            registry["instances"][instance.uuid] = instance
            registry["datasets_to_path"][instance.dataset] = instance.zonepath
            registry["paths_to_zone"][instance.zonepath] = instance.uuid
            registry["zones_to_dataset"][instance.uuid] = instance.dataset
        return cls(**registry)

    def __len__(self) -> int:
        return len(self.instances)
