"""
Constants for MDB_AUTOINDEX.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# INDEX NAMING CONSTANTS
# ============================================================================

MANAGED_INDEX_PREFIX: Final[str] = "di:"
"""Prefix of every index name created by a watcher."""

MANAGED_INDEX_FILTER_PREFIX: Final[str] = "di"
"""Prefix used to select managed indexes from usage statistics."""

KEY_SEPARATOR: Final[str] = ";"
"""Separator used when joining sorted field paths into an identity."""

MAX_PLAIN_IDENTITY_LENGTH: Final[int] = 120
"""Joined identities at or above this length are replaced by a digest."""

# ============================================================================
# REAPER CONSTANTS
# ============================================================================

DEFAULT_CLEANUP_INTERVAL_SECONDS: Final[int] = 604800  # 7 days
"""Default usage window (seconds); fewer than one access per window is stale."""

DEFAULT_REAP_PERIOD_SECONDS: Final[int] = 3600  # 1 hour
"""Default delay between two periodic reaper sweeps (seconds)."""

STALE_FREQUENCY_THRESHOLD: Final[float] = 1.0
"""Indexes used less often than this many times per window are dropped."""

INDEX_NOT_FOUND_CODE: Final[int] = 27
"""MongoDB error code returned when dropping an index that does not exist."""

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

# Connection pool defaults
DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""
