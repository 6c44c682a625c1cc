"""Fan-out of snapshots to registered consumers."""

import asyncio
import inspect
from typing import Any, Callable, List, Set

from zone_meter.logging_config import get_logger
from zone_meter.models import Snapshot

logger = get_logger(__name__)

SnapshotConsumer = Callable[[Snapshot], Any]


class SnapshotEmitter:
    """
    Publishes each snapshot to every subscribed consumer.

    Plain callables run inline and should return quickly. A consumer that
    returns an awaitable has it started as a task, never awaited by the emitter.
    Consumer failures are logged and not retried.
    """

    def __init__(self):
        """Initialize an emitter with no consumers."""
        self._consumers: List[SnapshotConsumer] = []
        self._tasks: Set[asyncio.Task] = set()

    @property
    def consumer_count(self) -> int:
        return len(self._consumers)

    def subscribe(self, consumer: SnapshotConsumer) -> None:
        """Register a consumer; subscribing twice has no effect."""
        if consumer not in self._consumers:
            self._consumers.append(consumer)

    def unsubscribe(self, consumer: SnapshotConsumer) -> None:
        """Remove a consumer if it is registered."""
        if consumer in self._consumers:
            self._consumers.remove(consumer)

    def emit(self, snapshot: Snapshot) -> None:
        """Deliver a snapshot to every consumer."""
        if not self._consumers:
            logger.debug(f"No consumers registered, dropping snapshot for {snapshot.uuid}")
            return

        for consumer in list(self._consumers):
            try:
                result = consumer(snapshot)
            except Exception as e:
                logger.error(
                    f"Consumer {consumer!r} failed for snapshot {snapshot.uuid}: {e}",
                    exc_info=True,
                )
                continue
            # Coroutine functions, partials of them and async __call__ all land here
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Async snapshot consumer failed: {error}", exc_info=error)

    async def drain(self) -> None:
        """Wait for asynchronous consumers that are still running."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
