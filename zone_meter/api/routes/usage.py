"""Zone usage endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from zone_meter.api.dependencies import get_snapshot_store
from zone_meter.models import Snapshot
from zone_meter.services.snapshot_store import SnapshotStore

router = APIRouter()


@router.get("/usage", response_model=List[Snapshot])
async def list_usage(store: SnapshotStore = Depends(get_snapshot_store)):
    """Latest usage snapshot of every zone."""
    return store.all()


@router.get("/usage/{uuid}", response_model=Snapshot)
async def get_usage(uuid: str, store: SnapshotStore = Depends(get_snapshot_store)):
    """Latest usage snapshot of one zone."""
    snapshot = store.get(uuid)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No usage recorded for zone '{uuid}'",
        )
    return snapshot
