"""Background scheduler running usage cycles on aligned wall-clock boundaries."""

import asyncio
import math
import time
from typing import Callable, List, Optional

from zone_meter.config import Settings, get_settings
from zone_meter.logging_config import get_logger
from zone_meter.models import Snapshot
from zone_meter.services.usage_cycle import CycleError, UsageCycle

logger = get_logger(__name__)


def next_fire_time(now: float, interval: int, offset: int) -> float:
    """
    Next time after ``now`` that lies ``offset`` seconds past a multiple of ``interval``.

    Times are seconds since the epoch, so every host using the same
    interval and offset fires at the same moments, across restarts too.
    """
    boundary = math.floor((now - offset) / interval) * interval + offset
    return boundary + interval


class UsageSchedulerService:
    """Background service that runs a usage cycle every interval."""

    def __init__(
        self,
        cycle: UsageCycle,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
        on_cycle_complete: Optional[Callable[[List[Snapshot]], None]] = None,
    ):
        """Initialize the usage scheduler service."""
        self.cycle = cycle
        self.settings = settings or get_settings()
        self.clock = clock
        self.on_cycle_complete = on_cycle_complete
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.cycles_skipped = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    async def start_scheduler(self) -> None:
        """Start the background usage scheduler."""
        if self._running:
            logger.warning("Usage scheduler is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._scheduler_loop())
        logger.info(
            f"Usage scheduler started (interval {self.settings.interval_seconds}s, "
            f"offset {self.settings.schedule_offset_seconds}s)"
        )

    async def stop_scheduler(self) -> None:
        """Stop the scheduler and cancel any cycle still running."""
        if not self._running:
            return

        self._running = False
        for task in (self._task, self._cycle_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        logger.info("Usage scheduler stopped")

    async def _scheduler_loop(self) -> None:
        """Sleep until each aligned boundary and fire a cycle there."""
        interval = self.settings.interval_seconds
        offset = self.settings.schedule_offset_seconds

        fire_at: Optional[float] = None
        while self._running:
            # Never earlier than the boundary just fired, even if the wall clock lags the sleep
            now = self.clock() if fire_at is None else max(self.clock(), fire_at)
            fire_at = next_fire_time(now, interval, offset)
            try:
                await asyncio.sleep(max(0.0, fire_at - self.clock()))
            except asyncio.CancelledError:
                break
            self.fire()

    def fire(self) -> None:
        """Start a cycle in the background unless the previous one is still running."""
        if self.cycle_in_progress:
            self.cycles_skipped += 1
            logger.warning("Previous usage cycle still running, skipping this interval")
            return
        self._cycle_task = asyncio.create_task(self.run_cycle())

    async def run_cycle(self) -> None:
        """Run one cycle, logging failures without stopping the schedule."""
        try:
            snapshots = await self.cycle.run()
            self.cycles_completed += 1
            if self.on_cycle_complete is not None:
                self.on_cycle_complete(snapshots)
        except CycleError as e:
            self.cycles_failed += 1
            logger.error(f"Error gathering zone usage: {e}", exc_info=True)
        except Exception as e:
            self.cycles_failed += 1
            logger.error(f"Unexpected error in usage cycle: {e}", exc_info=True)
