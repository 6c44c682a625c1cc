"""Request dependencies shared by the routes."""

from fastapi import Request

from zone_meter.services.snapshot_store import SnapshotStore


def get_snapshot_store(request: Request) -> SnapshotStore:
    """Snapshot store fed by the usage cycle."""
    return request.app.state.snapshot_store
