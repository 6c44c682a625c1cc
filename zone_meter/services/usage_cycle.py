"""One gather-transform-emit run over all zones."""

import asyncio
import time
from typing import List, Optional

from zone_meter.accessors import AccessorError, ZoneAccessors
from zone_meter.config import Settings, get_settings
from zone_meter.logging_config import get_logger
from zone_meter.models import Snapshot
from zone_meter.services.disk_usage import DiskUsageCollector
from zone_meter.services.emitter import SnapshotEmitter
from zone_meter.services.instance_enumerator import InstanceEnumerator
from zone_meter.services.network_usage import NetworkUsageCollector
from zone_meter.services.transform import build_snapshots

logger = get_logger(__name__)


class CycleError(Exception):
    """Raised when a cycle is aborted; nothing was emitted."""


class UsageCycle:
    """Runs the usage stages in order and emits the resulting snapshots."""

    def __init__(
        self,
        accessors: ZoneAccessors,
        emitter: SnapshotEmitter,
        settings: Optional[Settings] = None,
    ):
        """Initialize the cycle with its accessors and emitter."""
        self.settings = settings or get_settings()
        self.emitter = emitter
        self.network_collector = NetworkUsageCollector(accessors)
        self.enumerator = InstanceEnumerator(
            accessors, max_concurrency=self.settings.max_concurrency
        )
        self.disk_collector = DiskUsageCollector(accessors)

    async def gather(self) -> List[Snapshot]:
        """
        Collect and join usage for every zone without emitting.

        Network counters are read first so they are closest to the start of
        the cycle. All cycle state lives in local variables.
        """
        network = await self.network_collector.collect()
        registry = await self.enumerator.enumerate()
        disk = await self.disk_collector.collect(registry)
        return build_snapshots(registry, network, disk)

    async def run(self) -> List[Snapshot]:
        """
        Gather snapshots within the cycle deadline, then emit each one.

        Raises:
            CycleError: If an accessor fails or the deadline passes
        """
        start = time.monotonic()
        timeout = self.settings.cycle_timeout_seconds
        try:
            snapshots = await asyncio.wait_for(self.gather(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CycleError(f"Usage cycle exceeded its {timeout}s deadline") from e
        except AccessorError as e:
            raise CycleError(f"Usage cycle aborted: {e}") from e

        for snapshot in snapshots:
            self.emitter.emit(snapshot)

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(f"Took {elapsed_ms:.0f}ms to produce report for {len(snapshots)} zones")
        return snapshots
