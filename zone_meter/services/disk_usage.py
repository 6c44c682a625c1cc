"""Service for collecting per-zone dataset usage."""

from typing import Dict, Tuple, Union

from zone_meter.accessors import ZoneAccessors
from zone_meter.logging_config import get_logger
from zone_meter.models import NOT_APPLICABLE, DiskDatasetSample, Instance, InstanceRegistry

logger = get_logger(__name__)

NUMERIC_PROPERTIES = ("used", "available", "referenced", "quota", "volsize")
TEXT_PROPERTIES = ("type", "mountpoint", "origin")
DATASET_PROPERTIES = (
    "used",
    "available",
    "referenced",
    "type",
    "mountpoint",
    "quota",
    "origin",
    "volsize",
)

DiskUsage = Dict[str, Dict[str, DiskDatasetSample]]


def dataset_prefixes(instance: Instance) -> Tuple[str, str]:
    """
    Dataset name prefixes belonging to a zone.

    The first is the zone root dataset, the second the zone's core dump
    dataset ``<pool>/cores/<uuid>``.
    """
    return instance.dataset, f"{instance.pool}/cores/{instance.uuid}"


def coerce_numeric(value: str) -> Union[int, str]:
    """
    Convert a numeric property to an integer.

    The not-applicable sentinel is returned untouched, as is any value that
    is not an integer.
    """
    if value == NOT_APPLICABLE:
        return value
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Keeping non-integer dataset property value {value!r} as text")
        return value


def build_dataset_sample(properties: Dict[str, str]) -> DiskDatasetSample:
    """Build a sample from raw property text, coercing the numeric properties."""
    fields: Dict[str, Union[int, str]] = {}
    for prop in NUMERIC_PROPERTIES:
        if prop in properties:
            fields[prop] = coerce_numeric(properties[prop])
    for prop in TEXT_PROPERTIES:
        if prop in properties:
            fields[prop] = properties[prop]
    return DiskDatasetSample(**fields)


class DiskUsageCollector:
    """Matches host datasets to zones by name prefix."""

    def __init__(self, accessors: ZoneAccessors):
        """Initialize the collector."""
        self.accessors = accessors

    async def collect(self, registry: InstanceRegistry) -> DiskUsage:
        """
        Read properties of all datasets once and attach them to zones.

        Every zone in the registry gets an entry, empty when no dataset matches.

        Raises:
            AccessorError: If the dataset properties cannot be read
        """
        datasets = await self.accessors.get_dataset_properties(DATASET_PROPERTIES)

        usage: DiskUsage = {}
        for uuid, instance in registry.instances.items():
            prefixes = dataset_prefixes(instance)
            usage[uuid] = {
                name: build_dataset_sample(properties)
                for name, properties in datasets.items()
                if name.startswith(prefixes)
            }

        logger.debug(f"Matched {len(datasets)} datasets against {len(usage)} zones")
        return usage
