"""UpdateScheduler - Background task that advances the TVL series.

Every ``interval`` seconds the scheduler calls ``MetricsStore.mutate()`` and
publishes the new record to the ``tvlUpdate`` websocket topic. It is the only
writer of the store after seeding.
"""

import asyncio
from typing import Optional, Set

from app.core.logging_config import get_logger
from app.services.websocket.manager import ConnectionManager
from .models import TVL_UPDATE_EVENT, TvlUpdateEvent
from .store import MetricSample, MetricsStore

logger = get_logger("update_scheduler")

DEFAULT_INTERVAL_S = 5.0


class UpdateScheduler:
    """Owns the mutate-and-publish loop for one store.

    Args:
        store: Store to mutate.
        sink: Connection manager that fans updates out to websocket clients.
        interval: Seconds between mutations.
        topic: Websocket topic the updates are published on.
    """

    def __init__(
        self,
        store: MetricsStore,
        sink: ConnectionManager,
        interval: float = DEFAULT_INTERVAL_S,
        topic: str = TVL_UPDATE_EVENT,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.store = store
        self.sink = sink
        self.interval = interval
        self.topic = topic

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        # publish tasks in flight, kept referenced until done
        self._publish_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> MetricSample:
        """Mutate the store once and schedule publishing the result.

        Returns as soon as the publish is scheduled, so a slow sink never
        delays the next mutation.
        """
        sample = self.store.mutate()
        payload = TvlUpdateEvent.from_sample(sample).model_dump()
        task = asyncio.create_task(self.sink.broadcast(self.topic, payload))
        self._publish_tasks.add(task)
        task.add_done_callback(self._on_publish_done)
        return sample

    def _on_publish_done(self, task: asyncio.Task) -> None:
        self._publish_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error publishing update: {task.exception()}")

    async def drain(self) -> None:
        """Wait for every publish scheduled so far to finish."""
        if self._publish_tasks:
            await asyncio.gather(*list(self._publish_tasks), return_exceptions=True)

    async def _run(self, stop_event: asyncio.Event) -> None:
        self.sink.register_topic(self.topic)
        logger.info(f"Update scheduler started, interval {self.interval}s")

        while not stop_event.is_set():
            try:
                # Wait for interval or until stop event is set
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

            try:
                sample = await self.tick()
                logger.debug(f"Published tvl={sample.tvl:.2f} at {sample.timestamp.isoformat()}")
            except Exception as e:
                logger.error(f"Error in update loop: {e}")

        logger.info("Update scheduler stopped")

    def start(self) -> None:
        """Start the background update task on the running loop."""
        if self.is_running:
            logger.warning("Update scheduler already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        logger.info("Update scheduler task created")

    def stop(self) -> None:
        """Stop the background update task."""
        if self._stop_event:
            self._stop_event.set()

        if self._task and not self._task.done():
            self._task.cancel()

        for task in list(self._publish_tasks):
            task.cancel()
        self._publish_tasks.clear()

        self._task = None
        self._stop_event = None
        logger.info("Update scheduler stop requested")
