"""
Core runtime components: connection handling and the watcher registry.
"""

from .connection import ConnectionManager
from .registry import WatcherRegistry

__all__ = ["ConnectionManager", "WatcherRegistry"]
