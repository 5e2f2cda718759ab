"""
MDB_AUTOINDEX - MongoDB Dynamic Index Watcher

Creates ascending indexes for field combinations applications query by,
and drops the ones it created once they stop being used.
"""

from .config import WatcherConfig
from .core import ConnectionManager, WatcherRegistry
from .exceptions import (
    AutoIndexError,
    ConfigurationError,
    IndexStoreError,
    InitializationError,
)
from .indexes import (
    IndexStore,
    IndexUsage,
    Watcher,
    filter_indexes,
    flatten_keys,
)

__version__ = "0.1.0"

__all__ = [
    # Watcher
    "Watcher",
    "WatcherRegistry",
    "IndexStore",
    "IndexUsage",
    "flatten_keys",
    "filter_indexes",
    # Runtime
    "WatcherConfig",
    "ConnectionManager",
    # Errors
    "AutoIndexError",
    "IndexStoreError",
    "InitializationError",
    "ConfigurationError",
]
