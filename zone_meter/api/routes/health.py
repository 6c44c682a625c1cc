"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from zone_meter.api.dependencies import get_snapshot_store
from zone_meter.config import get_settings
from zone_meter.services.snapshot_store import SnapshotStore

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/health/ready")
async def readiness_check(request: Request, store: SnapshotStore = Depends(get_snapshot_store)):
    """Ready once at least one usage cycle has delivered snapshots."""
    if store.last_updated is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No usage cycle has completed yet",
        )

    response = {
        "status": "ready",
        "service": settings.app_name,
        "zones": len(store),
        "last_updated": store.last_updated.isoformat(),
    }
    scheduler = getattr(request.app.state, "usage_scheduler", None)
    if scheduler is not None:
        response["cycles"] = {
            "completed": scheduler.cycles_completed,
            "failed": scheduler.cycles_failed,
            "skipped": scheduler.cycles_skipped,
        }
    return response


@router.get("/health/live")
async def liveness_check():
    """Liveness check endpoint."""
    return {"status": "alive"}
