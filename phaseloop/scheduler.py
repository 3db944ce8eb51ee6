"""
Ingestion Scheduler.

Background task that runs the feed ingestion pipeline shortly after startup
and then on a fixed interval.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ingestion import IngestionPipeline, IngestionResult


logger = logging.getLogger(__name__)


class IngestionScheduler:
    """
    Background scheduler for feed ingestion.

    Runs are single-flight: a trigger that fires while a run is still in
    progress is skipped, not queued.
    """

    def __init__(
        self,
        pipeline: "IngestionPipeline",
        interval_minutes: float = 120,
        initial_delay_seconds: float = 10,
    ):
        self.pipeline = pipeline
        self.interval_minutes = interval_minutes
        self.initial_delay_seconds = initial_delay_seconds
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self.last_result: "IngestionResult | None" = None

    @property
    def is_running(self) -> bool:
        """True while an ingestion run is in flight."""
        return self._lock.locked()

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the scheduling loop."""
        if self.is_started:
            return
        self._task = asyncio.create_task(self._schedule_loop())
        logger.info(
            f"Ingestion scheduler started (interval: {self.interval_minutes} minutes, "
            f"first run in {self.initial_delay_seconds} seconds)"
        )

    async def stop(self):
        """Stop the scheduling loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Ingestion scheduler stopped")

    async def run_now(self) -> "IngestionResult | None":
        """
        Run the pipeline immediately.

        Returns None when a run is already in progress.
        """
        if self._lock.locked():
            logger.info("Ingestion already in progress, skipping this trigger")
            return None

        async with self._lock:
            try:
                self.last_result = await self.pipeline.run()
            except Exception as e:
                logger.exception(f"Ingestion run failed: {e}")
                return None
            return self.last_result

    async def _schedule_loop(self):
        """Main scheduling loop."""
        # Initial delay to let the server fully start
        await asyncio.sleep(self.initial_delay_seconds)

        while True:
            await self.run_now()
            await asyncio.sleep(self.interval_minutes * 60)
