"""
Connection management for MDB_AUTOINDEX.

This module handles MongoDB connection initialization and shutdown for
host processes (and the CLI) that do not already own a Motor client.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import logging
import time

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from ..config import WatcherConfig
from ..constants import DEFAULT_MAX_IDLE_TIME_MS
from ..exceptions import InitializationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Manages MongoDB connection lifecycle and configuration.

    Handles connection initialization, validation, and shutdown.
    """

    def __init__(self, config: WatcherConfig) -> None:
        """
        Initialize the connection manager.

        Args:
            config: Configuration holding the URI, database name and pool sizes

        Raises:
            ConfigurationError: If the URI or database name is missing
        """
        config.require_connection()
        self.config = config

        self._mongo_client: AsyncIOMotorClient | None = None
        self._mongo_db: AsyncIOMotorDatabase | None = None
        self._initialized: bool = False

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        The connected database.

        Raises:
            InitializationError: If initialize() has not completed
        """
        if not self._initialized or self._mongo_db is None:
            raise InitializationError(
                "ConnectionManager not initialized. Call initialize() first.",
                db_name=self.config.db_name,
            )
        return self._mongo_db

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Return a collection of the connected database."""
        return self.database[name]

    async def initialize(self) -> None:
        """
        Initialize the MongoDB connection.

        Raises:
            InitializationError: If the server cannot be reached
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("ConnectionManager already initialized. Skipping re-initialization.")
            return

        contextual_logger.info(
            "Initializing MongoDB connection",
            extra={
                "db_name": self.config.db_name,
                "max_pool_size": self.config.max_pool_size,
                "min_pool_size": self.config.min_pool_size,
            },
        )

        try:
            self._mongo_client = AsyncIOMotorClient(
                self.config.mongo_uri,
                serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
                appname="MDB_AUTOINDEX",
                maxPoolSize=self.config.max_pool_size,
                minPoolSize=self.config.min_pool_size,
                maxIdleTimeMS=DEFAULT_MAX_IDLE_TIME_MS,
            )

            # Verify connection
            await self._mongo_client.admin.command("ping")
            self._mongo_db = self._mongo_client[self.config.db_name]

            self._initialized = True
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=True)
            contextual_logger.info(
                "MongoDB connection initialized successfully",
                extra={
                    "db_name": self.config.db_name,
                    "duration_ms": round(duration_ms, 2),
                },
            )
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            if self._mongo_client is not None:
                self._mongo_client.close()
                self._mongo_client = None
            raise InitializationError(
                f"Failed to connect to MongoDB: {e}",
                mongo_uri=self.config.mongo_uri,
                db_name=self.config.db_name,
                context={"error_type": type(e).__name__},
            ) from e

    async def shutdown(self) -> None:
        """Close the MongoDB client."""
        if self._mongo_client is not None:
            self._mongo_client.close()
            logger.info("MongoDB connection closed.")
        self._mongo_client = None
        self._mongo_db = None
        self._initialized = False

    async def __aenter__(self) -> "ConnectionManager":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
