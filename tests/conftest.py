"""Pytest configuration and shared fixtures."""

import asyncio
import base64
from typing import Any, Dict, Generator, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from zone_meter.accessors import AccessorError, ZoneAccessors, ZoneNotFoundError
from zone_meter.config import Settings
from zone_meter.models import (
    LinkStat,
    ZoneListing,
    ZoneStateFound,
    ZoneStateResult,
    ZoneStatus,
)

ZONE_A = "4f2a6c1e-8d0b-4b8e-9c55-1e2d3c4b5a60"
ZONE_B = "9b7e3d21-0c4a-4f6e-8a12-7d6c5b4a3f21"
BOOT_TIME = 1_700_000_000


class FakeAccessors(ZoneAccessors):
    """In-memory accessors describing a fixed host."""

    def __init__(
        self,
        zones: List[ZoneListing],
        configs: Dict[str, Dict[str, Any]],
        zone_ids: Dict[int, str],
        link_stats: List[LinkStat],
        datasets: Dict[str, Dict[str, str]],
        states: Optional[Dict[str, ZoneStateResult]] = None,
        boot_time: int = BOOT_TIME,
    ):
        self.zones = zones
        self.configs = configs
        self.zone_ids = zone_ids
        self.link_stats = link_stats
        self.datasets = datasets
        self.states = states or {}
        self.boot_time = boot_time
        self.fail_boot_time = False
        self.fail_datasets = False
        self.list_delay = 0.0
        self.state_delay = 0.0
        self.calls: Dict[str, int] = {}
        self.active_state_lookups = 0
        self.max_active_state_lookups = 0

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def list_zones(self) -> List[ZoneListing]:
        self._count("list_zones")
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        return list(self.zones)

    async def get_zone_state(self, name: str) -> ZoneStateResult:
        self._count("get_zone_state")
        self.active_state_lookups += 1
        self.max_active_state_lookups = max(
            self.max_active_state_lookups, self.active_state_lookups
        )
        try:
            if self.state_delay:
                await asyncio.sleep(self.state_delay)
            return self.states.get(name, ZoneStateFound(name=name, status=ZoneStatus.RUNNING))
        finally:
            self.active_state_lookups -= 1

    async def get_zone_config(self, name: str) -> Dict[str, Any]:
        self._count("get_zone_config")
        if name not in self.configs:
            raise ZoneNotFoundError(f"No configuration for zone {name}")
        return self.configs[name]

    async def get_zone_name_by_id(self, zoneid: int) -> Optional[str]:
        self._count("get_zone_name_by_id")
        return self.zone_ids.get(zoneid)

    async def read_link_stats(self) -> List[LinkStat]:
        self._count("read_link_stats")
        return list(self.link_stats)

    async def get_dataset_properties(self, properties: Sequence[str]) -> Dict[str, Dict[str, str]]:
        self._count("get_dataset_properties")
        if self.fail_datasets:
            raise AccessorError("zfs get failed", command=["zfs", "get"], returncode=1)
        return {
            name: {prop: value for prop, value in props.items() if prop in properties}
            for name, props in self.datasets.items()
        }

    async def get_boot_time(self) -> int:
        self._count("get_boot_time")
        if self.fail_boot_time:
            raise AccessorError("kstat failed", command=["kstat"], returncode=1)
        return self.boot_time


def encode_alias(alias: str) -> str:
    """Encode an alias the way zone attributes store it."""
    return base64.b64encode(alias.encode("utf-8")).decode("ascii")


def dataset_properties(**overrides: str) -> Dict[str, str]:
    """Raw ``zfs get -p`` text values of a filesystem."""
    properties = {
        "used": "1048576",
        "available": "10737418240",
        "referenced": "524288",
        "type": "filesystem",
        "mountpoint": "/",
        "quota": "10737418240",
        "origin": "-",
        "volsize": "-",
    }
    properties.update(overrides)
    return properties


def zone_config(uuid: str, alias: str) -> Dict[str, Any]:
    return {
        "name": uuid,
        "zonepath": f"/pool0/zones/{uuid}",
        "brand": "joyent",
        "autoboot": "true",
        "attributes": {"alias": encode_alias(alias), "owner-uuid": "930896af"},
        "nets": [{"physical": "net0", "mac-addr": "90:b8:d0:12:34:56"}],
        "datasets": [],
    }


@pytest.fixture
def settings() -> Settings:
    """Settings with short deadlines suitable for tests."""
    return Settings(
        interval_seconds=60,
        schedule_offset_seconds=5,
        cycle_timeout_seconds=5,
        max_concurrency=4,
    )


@pytest.fixture
def fake_accessors() -> FakeAccessors:
    """A host with the global zone and two running zones on pool0."""
    return FakeAccessors(
        zones=[
            ZoneListing(name="global", uuid="", zonepath="/"),
            ZoneListing(name=ZONE_A, uuid="os-" + ZONE_A, zonepath=f"/pool0/zones/{ZONE_A}"),
            ZoneListing(name=ZONE_B, uuid="os-" + ZONE_B, zonepath=f"/pool0/zones/{ZONE_B}"),
        ],
        configs={
            ZONE_A: zone_config(ZONE_A, "web01"),
            ZONE_B: zone_config(ZONE_B, "db01"),
        },
        zone_ids={1: ZONE_A, 2: ZONE_B},
        link_stats=[
            LinkStat(name="z1_net0", crtime=2_500_000_000, obytes64=1000, rbytes64=2000),
            LinkStat(name="e1000g0", crtime=1_000_000_000, obytes64=5, rbytes64=6),
        ],
        datasets={
            "pool0": dataset_properties(mountpoint="/pool0"),
            f"pool0/zones/{ZONE_A}": dataset_properties(mountpoint=f"/pool0/zones/{ZONE_A}"),
            f"pool0/zones/{ZONE_B}": dataset_properties(
                used="2097152", mountpoint=f"/pool0/zones/{ZONE_B}"
            ),
            f"pool0/cores/{ZONE_B}": dataset_properties(
                quota="-", mountpoint=f"/pool0/zones/{ZONE_B}/cores"
            ),
            "pool0/cores/global": dataset_properties(mountpoint="/pool0/global/cores"),
        },
    )


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Test client with an empty snapshot store."""
    from zone_meter.api.app import app
    from zone_meter.services.snapshot_store import SnapshotStore

    original_store = app.state.snapshot_store
    app.state.snapshot_store = SnapshotStore()

    # Startup events are not run without a context manager
    client = TestClient(app)
    try:
        yield client
    finally:
        app.state.snapshot_store = original_store
