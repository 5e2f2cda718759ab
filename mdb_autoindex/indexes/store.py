"""
Index store adapter.

Provides an async-native interface over the four Motor collection
primitives a watcher needs: listing indexes, creating and dropping a
regular index, and reading ``$indexStats`` usage counters.

Driver errors are translated into ``IndexStoreError`` so callers only deal
with one exception type per failure class.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import (
    ConnectionFailure,
    InvalidOperation,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..constants import INDEX_NOT_FOUND_CODE
from ..exceptions import IndexStoreError

logger = logging.getLogger(__name__)

INDEX_STATS_PIPELINE: List[Dict[str, Any]] = [{"$indexStats": {}}]


class IndexStore:
    """
    Regular (non-search) index operations for a single collection.

    The collection is duck-typed: anything exposing Motor's
    ``list_indexes``/``create_index``/``drop_index``/``aggregate`` works.
    """

    __slots__ = ("_collection",)

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """The underlying collection."""
        return self._collection

    @property
    def collection_name(self) -> str:
        return getattr(self._collection, "name", "<unknown>")

    def _error(
        self, message: str, operation: str, index_name: Optional[str] = None
    ) -> IndexStoreError:
        return IndexStoreError(
            message,
            operation=operation,
            collection_name=self.collection_name,
            index_name=index_name,
        )

    async def list_indexes(self) -> List[Dict[str, Any]]:
        """Lists all standard (non-search) indexes on the collection."""
        try:
            return await self._collection.list_indexes().to_list(length=None)
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.exception(f"Connection error listing indexes on '{self.collection_name}'")
            raise self._error(
                f"Connection failed while listing indexes on '{self.collection_name}'",
                "list_indexes",
            ) from e
        except (OperationFailure, InvalidOperation) as e:
            logger.exception(f"Database error listing indexes on '{self.collection_name}'")
            raise self._error(
                f"Failed to list indexes on '{self.collection_name}'", "list_indexes"
            ) from e

    async def create_index(
        self,
        keys: List[Tuple[str, Any]],
        name: str,
        background: bool = True,
    ) -> str:
        """
        Creates a standard database index.

        Args:
            keys: List of (field, direction) tuples
            name: Index name
            background: Ask the server for a non-blocking build

        Returns:
            Name of the created index

        Raises:
            IndexStoreError: If the server rejects the index or is unreachable
        """
        try:
            created = await self._collection.create_index(keys, name=name, background=background)
        except OperationFailure as e:
            logger.debug(f"OperationFailure creating index '{name}': {e}")
            raise self._error(f"Failed to create index '{name}'", "create_index", name) from e
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            raise self._error(
                f"Connection failed while creating index '{name}'", "create_index", name
            ) from e
        except InvalidOperation as e:
            raise self._error(
                f"Cannot create index '{name}': MongoDB client is closed", "create_index", name
            ) from e

        logger.info(f"Successfully created index '{created}' on '{self.collection_name}'.")
        return created

    async def drop_index(self, name: str) -> None:
        """Drops a standard database index by name. Missing indexes are ignored."""
        try:
            await self._collection.drop_index(name)
            logger.info(f"Successfully dropped index '{name}' from '{self.collection_name}'.")
        except OperationFailure as e:
            if e.code == INDEX_NOT_FOUND_CODE or "index not found" in str(e).lower():
                logger.info(f"Index '{name}' does not exist. Nothing to drop.")
                return
            logger.exception(f"OperationFailure dropping index '{name}'")
            raise self._error(f"Failed to drop index '{name}'", "drop_index", name) from e
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.exception(f"Connection error dropping index '{name}'")
            raise self._error(
                f"Connection failed while dropping index '{name}'", "drop_index", name
            ) from e
        except InvalidOperation as e:
            raise self._error(
                f"Cannot drop index '{name}': MongoDB client is closed", "drop_index", name
            ) from e

    async def index_stats(self) -> List[Dict[str, Any]]:
        """Returns the ``$indexStats`` usage document of every index."""
        try:
            cursor = self._collection.aggregate(INDEX_STATS_PIPELINE)
            return await cursor.to_list(length=None)
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.exception(f"Connection error reading index stats on '{self.collection_name}'")
            raise self._error(
                f"Connection failed while reading index stats on '{self.collection_name}'",
                "index_stats",
            ) from e
        except (OperationFailure, InvalidOperation) as e:
            logger.exception(f"Database error reading index stats on '{self.collection_name}'")
            raise self._error(
                f"Failed to read index stats on '{self.collection_name}'", "index_stats"
            ) from e
