"""Network and disk usage samples."""

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# zfs prints this for properties that do not apply to a dataset
NOT_APPLICABLE = "-"

NumericProperty = Union[int, str]


class LinkStat(BaseModel):
    """Raw counters of one datalink as read from kstat."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="kstat name, e.g. z12_net0")
    crtime: int = Field(..., description="Creation time in nanoseconds since boot")
    obytes64: int = Field(default=0, description="Bytes sent")
    rbytes64: int = Field(default=0, description="Bytes received")


class NetworkUsageSample(BaseModel):
    """Cumulative byte counters of one zone link."""

    model_config = ConfigDict(frozen=True)

    sent_bytes: int = Field(..., description="Bytes sent since counter_start")
    received_bytes: int = Field(..., description="Bytes received since counter_start")
    counter_start: datetime = Field(..., description="When the link counters started")


class DiskDatasetSample(BaseModel):
    """Properties of one dataset attached to a zone."""

    model_config = ConfigDict(frozen=True)

    used: NumericProperty = NOT_APPLICABLE
    available: NumericProperty = NOT_APPLICABLE
    referenced: NumericProperty = NOT_APPLICABLE
    type: str = NOT_APPLICABLE
    mountpoint: str = NOT_APPLICABLE
    quota: NumericProperty = NOT_APPLICABLE
    origin: str = NOT_APPLICABLE
    volsize: NumericProperty = NOT_APPLICABLE
