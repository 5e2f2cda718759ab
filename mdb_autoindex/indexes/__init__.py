"""
Index Management Module

Provides the dynamic index watcher and the helpers it is built on.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

from .helpers import (
    build_index_keys,
    filter_indexes,
    flatten_keys,
    index_identity,
    managed_index_name,
    usage_frequency,
)
from .store import IndexStore
from .watcher import IndexUsage, Watcher

__all__ = [
    # Watcher
    "Watcher",
    "IndexUsage",
    "IndexStore",
    # Helpers
    "flatten_keys",
    "filter_indexes",
    "index_identity",
    "managed_index_name",
    "build_index_keys",
    "usage_frequency",
]
