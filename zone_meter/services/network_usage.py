"""Service for collecting per-zone network counters."""

import re
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from zone_meter.accessors import ZoneAccessors
from zone_meter.logging_config import get_logger
from zone_meter.models import LinkStat, NetworkUsageSample

logger = get_logger(__name__)

# Links created for a non-global zone are named z<zoneid>_<link>
ZONE_LINK_RE = re.compile(r"^z(\d+)_(.+)$")

NetworkUsage = Dict[str, Dict[str, NetworkUsageSample]]


def parse_link_name(name: str) -> Optional[Tuple[int, str]]:
    """
    Split a zone link kstat name into ``(zoneid, link name)``.

    Returns None for names that do not follow the ``z<zoneid>_<link>``
    convention, such as links of the global zone.
    """
    match = ZONE_LINK_RE.match(name)
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def counter_start(boot_time: int, crtime: int) -> datetime:
    """Absolute time a link's counters started: boot time plus link creation offset (ns)."""
    return datetime.fromtimestamp(boot_time + crtime / 1_000_000_000, tz=timezone.utc)


class NetworkUsageCollector:
    """Reads link counters and attributes them to zones."""

    def __init__(self, accessors: ZoneAccessors):
        """Initialize the collector."""
        self.accessors = accessors

    async def collect(self) -> NetworkUsage:
        """
        Read every link counter once and group the samples by zone and link.

        Raises:
            AccessorError: If the boot time or link statistics cannot be read
        """
        boot_time = await self.accessors.get_boot_time()
        stats = await self.accessors.read_link_stats()

        zone_names: Dict[int, Optional[str]] = {}
        usage: NetworkUsage = {}

        for stat in stats:
            parsed = parse_link_name(stat.name)
            if parsed is None:
                continue
            zoneid, link = parsed

            if zoneid not in zone_names:
                zone_names[zoneid] = await self.accessors.get_zone_name_by_id(zoneid)
            zonename = zone_names[zoneid]
            if zonename is None:
                logger.debug(f"Dropping link {stat.name}: zone id {zoneid} no longer exists")
                continue

            usage.setdefault(zonename, {})[link] = self._sample(stat, boot_time)

        return usage

    @staticmethod
    def _sample(stat: LinkStat, boot_time: int) -> NetworkUsageSample:
        return NetworkUsageSample(
            sent_bytes=stat.obytes64,
            received_bytes=stat.rbytes64,
            counter_start=counter_start(boot_time, stat.crtime),
        )
