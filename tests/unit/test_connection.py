"""
Unit tests for ConnectionManager.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from mdb_autoindex.config import WatcherConfig
from mdb_autoindex.core.connection import ConnectionManager
from mdb_autoindex.exceptions import ConfigurationError, InitializationError
from mdb_autoindex.observability import get_metrics_collector


@pytest.fixture
def connection_config() -> WatcherConfig:
    return WatcherConfig(
        mongo_uri="mongodb://localhost:27017",
        db_name="test_db",
        max_pool_size=10,
        min_pool_size=1,
    )


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    return client


class TestConnectionManager:
    """Test connection lifecycle."""

    def test_requires_uri(self):
        with pytest.raises(ConfigurationError):
            ConnectionManager(WatcherConfig(db_name="test_db"))

    @pytest.mark.asyncio
    async def test_initialize(self, connection_config, mock_client):
        with patch(
            "mdb_autoindex.core.connection.AsyncIOMotorClient", return_value=mock_client
        ) as client_cls:
            manager = ConnectionManager(connection_config)
            await manager.initialize()

        mock_client.admin.command.assert_awaited_once_with("ping")
        kwargs = client_cls.call_args.kwargs
        assert kwargs["maxPoolSize"] == 10
        assert kwargs["minPoolSize"] == 1
        assert manager.database is mock_client["test_db"]
        assert manager.get_collection("orders") is mock_client["test_db"]["orders"]
        assert get_metrics_collector().get_operation_count("connection.initialize") == 1

    @pytest.mark.asyncio
    async def test_initialize_twice_is_noop(self, connection_config, mock_client):
        with patch(
            "mdb_autoindex.core.connection.AsyncIOMotorClient", return_value=mock_client
        ) as client_cls:
            manager = ConnectionManager(connection_config)
            await manager.initialize()
            await manager.initialize()

        client_cls.assert_called_once()

    @pytest.mark.asyncio
    async def test_initialize_failure(self, connection_config, mock_client):
        mock_client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("timeout"))

        with patch("mdb_autoindex.core.connection.AsyncIOMotorClient", return_value=mock_client):
            manager = ConnectionManager(connection_config)

            with pytest.raises(InitializationError) as exc_info:
                await manager.initialize()

        assert exc_info.value.context["error_type"] == "ServerSelectionTimeoutError"
        assert exc_info.value.db_name == "test_db"
        mock_client.close.assert_called_once()

    def test_database_before_initialize(self, connection_config):
        manager = ConnectionManager(connection_config)

        with pytest.raises(InitializationError):
            _ = manager.database

    @pytest.mark.asyncio
    async def test_context_manager_shuts_down(self, connection_config, mock_client):
        with patch("mdb_autoindex.core.connection.AsyncIOMotorClient", return_value=mock_client):
            async with ConnectionManager(connection_config) as manager:
                assert manager.database is not None

        mock_client.close.assert_called_once()
        with pytest.raises(InitializationError):
            _ = manager.database
