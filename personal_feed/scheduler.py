"""
Refresh Scheduler.

Background task that periodically refreshes feeds and pulls from the
sync endpoint.
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

import aiohttp

from .sync import SyncError

if TYPE_CHECKING:
    from .sync import SyncClient
    from .tasks import RefreshCoordinator


logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Background scheduler for the refresh cycle.

    Runs a refresh (and a sync pass, when a sync client is configured)
    every ``interval_minutes``.
    """

    def __init__(
        self,
        refresher: "RefreshCoordinator",
        sync_client: "SyncClient | None" = None,
        interval_minutes: float = 5,
        initial_delay: float = 10,
    ):
        self.refresher = refresher
        self.sync_client = sync_client
        self._interval_minutes = interval_minutes
        self._initial_delay = initial_delay
        self._task: asyncio.Task | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the scheduler."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Refresh scheduler started (interval: {self._interval_minutes} minutes)")

    async def stop(self):
        """Stop the scheduler."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Refresh scheduler stopped")

    async def run_once(self):
        """Perform a single refresh and sync."""
        logger.info(f"Scheduled refresh at {datetime.now().isoformat()}")
        await self.refresher.refresh()

        if self.sync_client:
            try:
                await self.sync_client.sync()
            except (SyncError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.warning(f"Scheduled sync failed: {e}")

    async def _loop(self):
        """Main scheduling loop."""
        # Initial delay to let the server fully start
        await asyncio.sleep(self._initial_delay)

        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in refresh loop: {e}")

            await asyncio.sleep(self._interval_minutes * 60)
