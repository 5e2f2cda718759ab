"""
Configuration management for MDB_AUTOINDEX.

Watchers can be created with no configuration at all; this module only
gathers the knobs a host process may want to tune (connection pool sizes,
reaper windows) and reads them from the environment.
"""

import os
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import (
    DEFAULT_CLEANUP_INTERVAL_SECONDS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_REAP_PERIOD_SECONDS,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "MONGO_URI": "mongo_uri",
    "DB_NAME": "db_name",
    "MONGO_MAX_POOL_SIZE": "max_pool_size",
    "MONGO_MIN_POOL_SIZE": "min_pool_size",
    "MONGO_SERVER_SELECTION_TIMEOUT_MS": "server_selection_timeout_ms",
    "AUTOINDEX_CLEANUP_INTERVAL_SECONDS": "cleanup_interval_seconds",
    "AUTOINDEX_REAP_PERIOD_SECONDS": "reap_period_seconds",
    "AUTOINDEX_ROLLBACK_FAILED_CREATIONS": "rollback_failed_creations",
}


class WatcherConfig(BaseModel):
    """
    Index watcher configuration.

    Example:
        # Using environment variables
        config = WatcherConfig.from_env()

        # Or using direct parameters
        config = WatcherConfig(
            mongo_uri="mongodb://localhost:27017",
            db_name="my_db",
            cleanup_interval_seconds=3 * 24 * 3600,
        )
    """

    model_config = ConfigDict(frozen=True)

    mongo_uri: str = Field("", description="MongoDB connection URI")
    db_name: str = Field("", description="Database name")
    max_pool_size: int = Field(
        DEFAULT_MAX_POOL_SIZE, ge=1, description="Maximum connection pool size"
    )
    min_pool_size: int = Field(
        DEFAULT_MIN_POOL_SIZE, ge=1, description="Minimum connection pool size"
    )
    server_selection_timeout_ms: int = Field(
        DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        ge=1000,
        description="Server selection timeout in milliseconds",
    )
    cleanup_interval_seconds: float = Field(
        DEFAULT_CLEANUP_INTERVAL_SECONDS,
        gt=0,
        description="Usage window used to compute index access frequency",
    )
    reap_period_seconds: float = Field(
        DEFAULT_REAP_PERIOD_SECONDS,
        gt=0,
        description="Delay between two periodic reaper sweeps",
    )
    rollback_failed_creations: bool = Field(
        False,
        description="Forget the optimistic cache entry of a failed index creation",
    )

    @classmethod
    def from_env(cls, **overrides: Any) -> "WatcherConfig":
        """
        Build a configuration from environment variables.

        Args:
            **overrides: Explicit values that win over the environment

        Returns:
            Validated WatcherConfig

        Raises:
            ConfigurationError: If a value fails validation
        """
        values: dict[str, Any] = {}
        for env_var, field_name in ENV_VARS.items():
            raw = os.getenv(env_var)
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid configuration: {first.get('msg')}",
                config_key=key or None,
                config_value=first.get("input"),
            ) from e

    @property
    def cleanup_interval(self) -> timedelta:
        """Usage window as a timedelta."""
        return timedelta(seconds=self.cleanup_interval_seconds)

    def require_connection(self) -> None:
        """
        Validate the settings needed to open a MongoDB connection.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="mongo_uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )
