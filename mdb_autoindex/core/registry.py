"""
Watcher registry.

Keeps exactly one ``Watcher`` per collection for a host process and runs
the usage-based reaper periodically in the background.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import asyncio
import contextlib
import logging
from datetime import timedelta

from motor.motor_asyncio import AsyncIOMotorCollection

from ..config import WatcherConfig
from ..exceptions import AutoIndexError
from ..indexes import Watcher
from ..observability import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)


def _collection_key(collection: AsyncIOMotorCollection) -> str:
    return getattr(collection, "full_name", None) or collection.name


class WatcherRegistry:
    """
    One watcher per collection, plus an optional periodic cleanup loop.

    Example:
        registry = WatcherRegistry(WatcherConfig.from_env())
        orders = registry.watcher_for(db.orders)
        await orders.refresh()
        registry.start()
        ...
        await registry.stop()
    """

    def __init__(self, config: WatcherConfig | None = None) -> None:
        self._config = config or WatcherConfig()
        self._watchers: dict[str, Watcher] = {}
        self._loop_task: asyncio.Task | None = None

    @property
    def watchers(self) -> dict[str, Watcher]:
        """Registered watchers, keyed by collection full name."""
        return dict(self._watchers)

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def watcher_for(self, collection: AsyncIOMotorCollection) -> Watcher:
        """Return the watcher of ``collection``, creating it on first use."""
        key = _collection_key(collection)
        watcher = self._watchers.get(key)
        if watcher is None:
            watcher = Watcher(collection, config=self._config)
            self._watchers[key] = watcher
            logger.debug(f"Registered index watcher for '{key}'")
        return watcher

    async def refresh_all(self) -> None:
        """Reload the identity cache of every watcher."""
        for watcher in list(self._watchers.values()):
            await watcher.refresh()

    async def cleanup_all(self, interval: timedelta | None = None) -> dict[str, list[str]]:
        """
        Run the reaper on every collection, one after another.

        Returns:
            Dropped index names per collection

        Raises:
            IndexStoreError: On the first collection whose sweep fails
        """
        results: dict[str, list[str]] = {}
        for key, watcher in list(self._watchers.items()):
            results[key] = await watcher.cleanup(interval)
        return results

    def start(self, period: float | None = None) -> None:
        """
        Start the periodic cleanup loop. Calling it while running is a no-op.

        Args:
            period: Seconds between sweeps (defaults to ``reap_period_seconds``)
        """
        if self.running:
            return
        period = period if period is not None else self._config.reap_period_seconds
        self._loop_task = asyncio.get_running_loop().create_task(
            self._run_periodic_cleanup(period), name="autoindex:reaper"
        )
        logger.info(f"Started index reaper (every {period}s)")

    async def stop(self) -> None:
        """Stop the cleanup loop and wait for in-flight index creations."""
        if self._loop_task is not None:
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
            self._loop_task = None
            logger.info("Stopped index reaper")

        for watcher in list(self._watchers.values()):
            await watcher.wait_for_pending()

    async def _run_periodic_cleanup(self, period: float) -> None:
        while True:
            await asyncio.sleep(period)
            await self._sweep()

    async def _sweep(self) -> None:
        correlation_id = set_correlation_id()
        try:
            for key, watcher in list(self._watchers.items()):
                try:
                    dropped = await watcher.cleanup()
                except AutoIndexError:
                    logger.exception(
                        f"Index cleanup failed for '{key}' (sweep {correlation_id})"
                    )
                    continue
                if dropped:
                    logger.info(f"Dropped {len(dropped)} unused index(es) from '{key}': {dropped}")
        finally:
            clear_correlation_id()
