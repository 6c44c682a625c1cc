"""Interface to the operating system sources the usage cycle reads."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from zone_meter.models import LinkStat, ZoneListing, ZoneStateResult


class AccessorError(Exception):
    """Raised when an OS accessor fails."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.message = message
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ZoneNotFoundError(AccessorError):
    """Raised when a zone is no longer configured on the host."""


class ZoneAccessors(ABC):
    """Data sources for zones, link counters and datasets."""

    @abstractmethod
    async def list_zones(self) -> List[ZoneListing]:
        """List every zone configured on the host, including the global zone."""

    @abstractmethod
    async def get_zone_state(self, name: str) -> ZoneStateResult:
        """Look up the live state of a zone."""

    @abstractmethod
    async def get_zone_config(self, name: str) -> Dict[str, Any]:
        """
        Read the definition of a zone.

        Raises:
            ZoneNotFoundError: If the zone no longer exists
            AccessorError: For any other failure
        """

    @abstractmethod
    async def get_zone_name_by_id(self, zoneid: int) -> Optional[str]:
        """Resolve a running zone's numeric id to its name, None if no such zone."""

    @abstractmethod
    async def read_link_stats(self) -> List[LinkStat]:
        """Read the counters of every datalink on the host."""

    @abstractmethod
    async def get_dataset_properties(self, properties: Sequence[str]) -> Dict[str, Dict[str, str]]:
        """Read the given properties of every dataset, keyed by dataset name."""

    @abstractmethod
    async def get_boot_time(self) -> int:
        """Host boot time as a Unix timestamp in seconds."""
