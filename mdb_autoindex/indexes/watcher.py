"""
Dynamic index watcher.

A ``Watcher`` owns the index bookkeeping of one collection:

- ``track(fields)`` lazily creates an ascending compound index the first
  time a field combination is seen. It never suspends, so the
  check-then-insert on the identity cache cannot interleave with another
  ``track`` call on the same event loop.
- ``cleanup(interval)`` drops managed indexes used less than once per
  ``interval`` and reloads the identity cache.
- ``refresh()`` rebuilds the identity cache from the live index list.

Managed indexes are named ``di:<identity>``; indexes created by any other
means are never dropped.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from ..config import WatcherConfig
from ..constants import STALE_FREQUENCY_THRESHOLD
from ..exceptions import IndexStoreError
from ..observability import get_logger, timed_operation
from .helpers import (
    build_index_keys,
    filter_indexes,
    flatten_keys,
    index_identity,
    managed_index_name,
    usage_frequency,
)
from .store import IndexStore


@dataclass(frozen=True)
class IndexUsage:
    """Access frequency of one managed index over the reaper's usage window."""

    name: str
    ops: int
    since: datetime
    frequency: float

    @property
    def stale(self) -> bool:
        """Whether the index is used less than once per window."""
        return self.frequency < STALE_FREQUENCY_THRESHOLD

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "ops": self.ops,
            "since": self.since.isoformat(),
            "frequency": self.frequency,
            "stale": self.stale,
        }


class Watcher:
    """
    Self-tuning secondary-index manager for a single collection.

    Example:
        watcher = Watcher(db.orders)
        await watcher.refresh()

        watcher.track(["customer_id", "status"])  # True: creation scheduled
        watcher.track(["status", "customer_id"])  # False: same identity

        dropped = await watcher.cleanup()
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection | IndexStore,
        config: WatcherConfig | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            collection: Motor collection (or an IndexStore wrapping one)
            config: Optional configuration (defaults are used otherwise)
            logger: Optional logger; defaults to a contextual logger bound to
                the collection name
        """
        self._store = collection if isinstance(collection, IndexStore) else IndexStore(collection)
        self._config = config or WatcherConfig()
        self._logger = logger or get_logger(
            __name__, collection_name=self._store.collection_name
        )
        # Identities believed to exist on the collection
        self._indexes: set[str] = set()
        # In-flight creations, keyed by identity
        self._pending: dict[str, asyncio.Task] = {}

    @property
    def collection_name(self) -> str:
        return self._store.collection_name

    @property
    def store(self) -> IndexStore:
        return self._store

    @property
    def indexes(self) -> frozenset[str]:
        """Snapshot of the identity cache."""
        return frozenset(self._indexes)

    @property
    def pending(self) -> Mapping[str, asyncio.Task]:
        """Snapshot of in-flight index creations, keyed by identity."""
        return dict(self._pending)

    async def refresh(self) -> None:
        """
        Rebuild the identity cache from the collection's index list.

        The cache is replaced only once the whole list has been read; if the
        store call fails the previous cache is kept.

        Raises:
            IndexStoreError: If the index list cannot be fetched
        """
        with timed_operation("watcher.refresh", collection=self.collection_name):
            db_indexes = await self._store.list_indexes()

        self._indexes = {index_identity(db_index) for db_index in db_indexes}
        self._logger.debug(f"Loaded {len(self._indexes)} index identities")

    def track(self, fields: Iterable[str] | str) -> bool | None:
        """
        Make sure an index exists for a combination of fields.

        Must be called from a running event loop. The index is built in the
        background; failures are logged and never raised to the caller.

        Args:
            fields: Field paths queried together (order does not matter)

        Returns:
            None if ``fields`` is empty, False if the index is already known
            or being created, True if a new creation was started
        """
        if isinstance(fields, str):
            fields = [fields]
        fields = list(dict.fromkeys(fields))
        if not fields:
            return None

        identity = flatten_keys(fields)
        name = managed_index_name(identity)

        if identity in self._indexes or identity in self._pending:
            return False

        loop = asyncio.get_running_loop()
        self._logger.debug(f"adding {name} DynamicIndex to {self.collection_name}")

        # No await between the membership check above and this insert.
        self._indexes.add(identity)
        task = loop.create_task(
            self._create_index_safely(identity, name, build_index_keys(fields)),
            name=f"autoindex:{self.collection_name}:{name}",
        )
        self._pending[identity] = task
        task.add_done_callback(lambda done: self._forget_pending(identity, done))
        return True

    def _forget_pending(self, identity: str, task: asyncio.Task) -> None:
        if self._pending.get(identity) is task:
            del self._pending[identity]

    async def _create_index_safely(
        self, identity: str, name: str, keys: list[tuple[str, int]]
    ) -> None:
        """
        Create an index, logging instead of raising on failure.

        Args:
            identity: Identity the optimistic cache entry was stored under
            name: Managed index name
            keys: List of (field, direction) tuples for the index
        """
        try:
            with timed_operation("watcher.create_index", collection=self.collection_name):
                await self._store.create_index(keys, name=name, background=True)
        except IndexStoreError as e:
            self._logger.warning(f"Failed to auto-create index '{name}': {e}")
            if self._config.rollback_failed_creations:
                self._indexes.discard(identity)
            return

        self._logger.info(
            f"✨ Auto-created index '{name}' on {self.collection_name} "
            f"for fields: {[field for field, _ in keys]}"
        )

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight index creation has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

    async def usage_report(self, interval: timedelta | None = None) -> list[IndexUsage]:
        """
        Compute the access frequency of every managed index.

        Args:
            interval: Usage window (defaults to the configured cleanup interval)

        Returns:
            One IndexUsage per managed index, in ``$indexStats`` order

        Raises:
            IndexStoreError: If usage statistics cannot be read
        """
        interval = interval or self._config.cleanup_interval
        stats = filter_indexes(await self._store.index_stats())

        report = []
        for stat in stats:
            accesses = stat["accesses"]
            since = accesses["since"]
            ops = int(accesses["ops"])
            frequency = usage_frequency(ops, since, interval)
            report.append(IndexUsage(name=stat["name"], ops=ops, since=since, frequency=frequency))
        return report

    async def cleanup(self, interval: timedelta | None = None) -> list[str]:
        """
        Drop managed indexes used less than once per ``interval``.

        Candidates are dropped one at a time. A failing drop aborts the sweep
        and propagates. The identity cache is reloaded afterwards.

        Args:
            interval: Usage window (defaults to one week)

        Returns:
            Names of the dropped indexes

        Raises:
            IndexStoreError: If statistics, a drop or the final refresh fail
        """
        dropped: list[str] = []
        with timed_operation("watcher.cleanup", collection=self.collection_name):
            for usage in await self.usage_report(interval):
                if not usage.stale:
                    continue

                dropped.append(usage.name)
                self._logger.info(
                    f"dropping {usage.name} DynamicIndex from {self.collection_name} "
                    f"(frequency={usage.frequency:.3f})"
                )
                await self._drop_index(usage.name)

            await self.refresh()
        return dropped

    async def _drop_index(self, name: str) -> None:
        with timed_operation("watcher.drop_index", collection=self.collection_name):
            await self._store.drop_index(name)
