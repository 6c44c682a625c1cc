"""In-memory store of the most recent snapshot of each zone."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from zone_meter.models import Snapshot


class SnapshotStore:
    """Emitter consumer keeping the latest snapshot per zone."""

    def __init__(self):
        self._snapshots: Dict[str, Snapshot] = {}
        self.last_updated: Optional[datetime] = None

    def __call__(self, snapshot: Snapshot) -> None:
        self._snapshots[snapshot.uuid] = snapshot
        self.last_updated = datetime.now(timezone.utc)

    def get(self, uuid: str) -> Optional[Snapshot]:
        """Latest snapshot of a zone, or None if it was never reported."""
        return self._snapshots.get(uuid)

    def all(self) -> List[Snapshot]:
        """Latest snapshots ordered by zone uuid."""
        return [self._snapshots[uuid] for uuid in sorted(self._snapshots)]

    def prune(self, uuids: Iterable[str]) -> None:
        """Forget zones that are not in ``uuids``."""
        for uuid in set(self._snapshots) - set(uuids):
            del self._snapshots[uuid]

    def __len__(self) -> int:
        return len(self._snapshots)
