"""SmartOS accessors backed by zoneadm, kstat, zfs and the zone config files."""

import asyncio
import re
import xml.etree.ElementTree as ET
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from zone_meter.accessors.base import AccessorError, ZoneAccessors, ZoneNotFoundError
from zone_meter.config import Settings, get_settings
from zone_meter.logging_config import get_logger
from zone_meter.models import (
    LinkStat,
    ZoneListing,
    ZoneNotFound,
    ZoneStateError,
    ZoneStateFound,
    ZoneStateResult,
    ZoneStatus,
)

logger = get_logger(__name__)

NO_SUCH_ZONE_RE = re.compile(r"no such zone configured", re.IGNORECASE)
BOOT_TIME_STAT = "unix:0:system_misc:boot_time"
LINK_COUNTERS = ("crtime", "obytes64", "rbytes64")


def parse_zone_index(text: str) -> List[ZoneListing]:
    """
    Parse the zone index file.

    Each line is ``name:state:zonepath:uuid``; the uuid is empty for the
    global zone on some platforms. Comments and blank lines are skipped.
    """
    zones = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split(":")
        if len(fields) < 3:
            logger.warning(f"Skipping malformed zone index line: {line!r}")
            continue
        uuid = fields[3] if len(fields) > 3 else ""
        zones.append(ZoneListing(name=fields[0], uuid=uuid, zonepath=fields[2]))
    return zones


def parse_zoneadm_list(text: str) -> List[Tuple[Optional[int], str, str]]:
    """
    Parse ``zoneadm list -p`` output into ``(zoneid, name, state)`` tuples.

    Lines look like ``id:name:state:path:uuid:brand:ip-type``; zones that
    are not running report ``-`` as their id, returned as None.
    """
    entries = []
    for line in text.splitlines():
        fields = line.strip().split(":")
        if len(fields) < 3:
            continue
        zoneid = int(fields[0]) if fields[0].isdigit() else None
        entries.append((zoneid, fields[1], fields[2]))
    return entries


def _kstat_lines(text: str):
    for line in text.splitlines():
        if "\t" not in line:
            continue
        key, value = line.split("\t", 1)
        parts = key.split(":")
        if len(parts) != 4:
            continue
        yield parts, value.strip()


def _seconds_to_ns(value: str) -> int:
    return int(Decimal(value) * 1_000_000_000)


def parse_link_kstats(text: str) -> List[LinkStat]:
    """
    Parse ``kstat -p -m link`` output.

    kstat prints one ``module:instance:name:statistic<TAB>value`` line per
    statistic; ``crtime`` is printed in fractional seconds since boot.
    """
    links: Dict[Tuple[str, str], Dict[str, int]] = {}
    for (_module, instance, name, statistic), value in _kstat_lines(text):
        if statistic not in LINK_COUNTERS:
            continue
        counters = links.setdefault((instance, name), {})
        try:
            if statistic == "crtime":
                counters[statistic] = _seconds_to_ns(value)
            else:
                counters[statistic] = int(value)
        except (InvalidOperation, ValueError):
            logger.warning(f"Ignoring unparseable kstat value {name}:{statistic}={value!r}")

    stats = []
    for (_instance, name), counters in links.items():
        if "crtime" not in counters:
            continue
        stats.append(LinkStat(name=name, **counters))
    return stats


def parse_boot_time(text: str) -> int:
    """Parse ``kstat -p unix:0:system_misc:boot_time`` output."""
    for parts, value in _kstat_lines(text):
        if ":".join(parts) == BOOT_TIME_STAT:
            return int(value)
    raise ValueError(f"{BOOT_TIME_STAT} not found in kstat output")


def parse_zfs_get(text: str) -> Dict[str, Dict[str, str]]:
    """Parse ``zfs get -Hp -o name,property,value`` output into per-dataset property maps."""
    datasets: Dict[str, Dict[str, str]] = {}
    for line in text.splitlines():
        if not line:
            continue
        fields = line.split("\t")
        if len(fields) != 3:
            logger.warning(f"Skipping malformed zfs get line: {line!r}")
            continue
        name, prop, value = fields
        datasets.setdefault(name, {})[prop] = value
    return datasets


def parse_zone_xml(text: str) -> Dict[str, Any]:
    """
    Parse a zone's XML definition into a config document.

    Root attributes become top-level keys; ``<attr>`` elements are gathered
    under ``attributes``, ``<net>`` elements under ``nets`` and
    ``<dataset>`` names under ``datasets``.
    """
    root = ET.fromstring(text)
    if root.tag != "zone":
        raise ValueError(f"Expected <zone> root element, got <{root.tag}>")

    config: Dict[str, Any] = dict(root.attrib)
    config["attributes"] = {}
    config["nets"] = []
    config["datasets"] = []

    for child in root:
        if child.tag == "attr" and "name" in child.attrib:
            config["attributes"][child.attrib["name"]] = child.attrib.get("value", "")
        elif child.tag == "net":
            net = dict(child.attrib)
            for net_attr in child.findall("net-attr"):
                if "name" in net_attr.attrib:
                    net[net_attr.attrib["name"]] = net_attr.attrib.get("value", "")
            config["nets"].append(net)
        elif child.tag == "dataset" and "name" in child.attrib:
            config["datasets"].append(child.attrib["name"])

    return config


class SmartOSAccessors(ZoneAccessors):
    """Reads zone, link and dataset state from a SmartOS global zone."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize accessors with tool locations and timeouts from settings."""
        self.settings = settings or get_settings()

    async def _run(self, *args: str) -> str:
        """Run a command and return its stdout, raising AccessorError on failure."""
        command = [str(arg) for arg in args]
        timeout = self.settings.command_timeout_seconds
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise AccessorError(f"Cannot execute {command[0]}: {e}", command=command) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise AccessorError(
                f"{' '.join(command)} timed out after {timeout}s", command=command
            ) from e
        finally:
            # Cancellation by the cycle deadline or shutdown lands here too
            if process.returncode is None:
                process.kill()
                await asyncio.shield(process.wait())

        if process.returncode != 0:
            error_text = stderr.decode("utf-8", errors="replace").strip()
            raise AccessorError(
                error_text or f"{command[0]} exited with code {process.returncode}",
                command=command,
                returncode=process.returncode,
                stderr=error_text,
            )
        return stdout.decode("utf-8", errors="replace")

    async def _read_file(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def list_zones(self) -> List[ZoneListing]:
        """List zones from the zone index file."""
        path = self.settings.zones_index_path
        try:
            text = await self._read_file(path)
        except OSError as e:
            raise AccessorError(f"Cannot read zone index {path}: {e}") from e
        return parse_zone_index(text)

    async def get_zone_state(self, name: str) -> ZoneStateResult:
        """Look up a zone's state with ``zoneadm -z <name> list -p``."""
        try:
            output = await self._run(str(self.settings.zoneadm_path), "-z", name, "list", "-p")
        except AccessorError as e:
            if NO_SUCH_ZONE_RE.search(e.stderr or e.message):
                return ZoneNotFound(name=name)
            return ZoneStateError(name=name, message=e.message)

        for _zoneid, zonename, state in parse_zoneadm_list(output):
            if zonename != name:
                continue
            try:
                return ZoneStateFound(name=name, status=ZoneStatus(state))
            except ValueError:
                return ZoneStateError(name=name, message=f"Unknown zone state '{state}'")
        return ZoneStateError(name=name, message="zoneadm did not report the zone")

    async def get_zone_config(self, name: str) -> Dict[str, Any]:
        """Read and parse ``<zones_config_dir>/<name>.xml``."""
        path = self.settings.zones_config_dir / f"{name}.xml"
        try:
            text = await self._read_file(path)
        except FileNotFoundError as e:
            raise ZoneNotFoundError(f"No configuration for zone {name}") from e
        except OSError as e:
            raise AccessorError(f"Cannot read zone configuration {path}: {e}") from e

        try:
            return parse_zone_xml(text)
        except (ET.ParseError, ValueError) as e:
            raise AccessorError(f"Invalid zone configuration {path}: {e}") from e

    async def get_zone_name_by_id(self, zoneid: int) -> Optional[str]:
        """Resolve a running zone id through ``zoneadm list -p``."""
        output = await self._run(str(self.settings.zoneadm_path), "list", "-p")
        for entry_id, zonename, _state in parse_zoneadm_list(output):
            if entry_id == zoneid:
                return zonename
        return None

    async def read_link_stats(self) -> List[LinkStat]:
        """Read every link kstat in one call."""
        output = await self._run(str(self.settings.kstat_path), "-p", "-m", "link")
        return parse_link_kstats(output)

    async def get_dataset_properties(self, properties: Sequence[str]) -> Dict[str, Dict[str, str]]:
        """Read properties of every filesystem and volume in one ``zfs get`` call."""
        output = await self._run(
            str(self.settings.zfs_path),
            "get",
            "-Hp",
            "-t",
            "filesystem,volume",
            "-o",
            "name,property,value",
            ",".join(properties),
        )
        return parse_zfs_get(output)

    async def get_boot_time(self) -> int:
        """Read the host boot time from kstat."""
        output = await self._run(str(self.settings.kstat_path), "-p", BOOT_TIME_STAT)
        try:
            return parse_boot_time(output)
        except ValueError as e:
            raise AccessorError(str(e)) from e
