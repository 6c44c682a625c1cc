"""Service for enumerating the zones present on the host."""

import asyncio
import base64
import binascii
import copy
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from zone_meter.accessors import AccessorError, ZoneAccessors, ZoneNotFoundError
from zone_meter.logging_config import get_logger
from zone_meter.models import (
    Instance,
    InstanceRegistry,
    ZoneListing,
    ZoneNotFound,
    ZoneStateError,
)

logger = get_logger(__name__)

GLOBAL_ZONE = "global"


def decode_alias(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of a zone config with its base64 alias decoded to text.

    Zone attributes store the alias base64 encoded. A config without an
    alias is returned unchanged (as a copy); an alias that is not valid
    base64 UTF-8 is kept verbatim.
    """
    decoded = copy.deepcopy(config)
    attributes = decoded.get("attributes") or {}
    alias = attributes.get("alias")
    if not alias:
        return decoded

    try:
        attributes["alias"] = base64.b64decode(alias, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        logger.warning(f"Zone {config.get('name')} alias is not base64 text, keeping it as is")
    return decoded


def dataset_for_zonepath(zonepath: str) -> str:
    """Dataset name of a zone root: its zonepath without the leading separator."""
    return zonepath[1:] if zonepath.startswith("/") else zonepath


class InstanceEnumerator:
    """Builds the registry of zones observed in one cycle."""

    def __init__(self, accessors: ZoneAccessors, max_concurrency: int = 10):
        """Initialize the enumerator."""
        self.accessors = accessors
        self.max_concurrency = max_concurrency

    async def enumerate(self) -> InstanceRegistry:
        """
        List every non-global zone and fetch its state and configuration.

        Zones destroyed while the cycle runs are skipped. Any other
        accessor failure propagates and aborts the cycle.

        Raises:
            AccessorError: If the zone listing or a state/config lookup fails
        """
        zones = await self.accessors.list_zones()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(zone: ZoneListing) -> Optional[Instance]:
            async with semaphore:
                return await self._load_instance(zone)

        results = await asyncio.gather(
            *(bounded(zone) for zone in zones if zone.name != GLOBAL_ZONE)
        )
        instances = [instance for instance in results if instance is not None]

        logger.debug(f"Enumerated {len(instances)} of {len(zones)} listed zones")
        return InstanceRegistry.from_instances(instances)

    async def _load_instance(self, zone: ZoneListing) -> Optional[Instance]:
        timestamp = datetime.now(timezone.utc)

        state = await self.accessors.get_zone_state(zone.name)
        if isinstance(state, ZoneNotFound):
            logger.warning(f"Detected zone {zone.name} was destroyed")
            return None
        if isinstance(state, ZoneStateError):
            raise AccessorError(f"Cannot read state of zone {zone.name}: {state.message}")

        try:
            config = await self.accessors.get_zone_config(zone.name)
        except ZoneNotFoundError:
            logger.warning(f"Detected zone {zone.name} was destroyed before its config was read")
            return None

        return Instance(
            uuid=zone.name,
            os_uuid=zone.uuid,
            zonepath=zone.zonepath,
            dataset=dataset_for_zonepath(zone.zonepath),
            status=state.status,
            config=decode_alias(config),
            timestamp=timestamp,
        )
