"""FastAPI application setup."""

import os

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from zone_meter.config import get_settings
from zone_meter.logging_config import get_logger, setup_logging
from zone_meter.services.emitter import SnapshotEmitter
from zone_meter.services.snapshot_store import SnapshotStore

# Setup logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Periodic usage snapshots of the zones on this host",
    docs_url="/docs",
    redoc_url="/redoc",
)

# The store is the built-in consumer of the emitter
app.state.snapshot_emitter = SnapshotEmitter()
app.state.snapshot_store = SnapshotStore()
app.state.snapshot_emitter.subscribe(app.state.snapshot_store)


@app.on_event("startup")
async def startup_event():
    """Validate the host and start the usage scheduler."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")

    # Tests drive the cycle themselves with fake accessors
    if os.environ.get("PYTEST_CURRENT_TEST"):
        logger.info("Skipping configuration validation and scheduler in test environment")
        return

    from zone_meter.config.validation import validate_configuration

    try:
        validate_configuration(settings)
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise

    if not settings.scheduler_enabled:
        logger.info("Usage scheduler is disabled")
        return

    from zone_meter.accessors import SmartOSAccessors
    from zone_meter.services.usage_cycle import UsageCycle
    from zone_meter.services.usage_scheduler import UsageSchedulerService

    store: SnapshotStore = app.state.snapshot_store
    cycle = UsageCycle(SmartOSAccessors(settings), app.state.snapshot_emitter, settings)
    scheduler = UsageSchedulerService(
        cycle,
        settings,
        on_cycle_complete=lambda snapshots: store.prune(s.uuid for s in snapshots),
    )
    await scheduler.start_scheduler()
    app.state.usage_scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info(f"Shutting down {settings.app_name}")

    if hasattr(app.state, "usage_scheduler"):
        try:
            await app.state.usage_scheduler.stop_scheduler()
        except Exception as e:
            logger.error(f"Error stopping usage scheduler: {e}", exc_info=True)
    await app.state.snapshot_emitter.drain()


# Import routes (must be after app creation)
from zone_meter.api.routes import health, usage  # noqa: E402

for route_module, tag in ((health, "Health"), (usage, "Usage")):
    app.include_router(route_module.router, prefix=settings.api_prefix, tags=[tag])


@app.get("/")
async def root():
    """Redirect root to API documentation."""
    return RedirectResponse(url="/docs")
