"""
Helper functions for dynamic index management.

Pure functions shared by the watcher, the registry and the CLI: turning a
set of field paths into a stable index identity, selecting managed entries
from ``$indexStats`` output and computing access frequencies.
"""

import hashlib
import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from pymongo import ASCENDING

from ..constants import (
    KEY_SEPARATOR,
    MANAGED_INDEX_FILTER_PREFIX,
    MANAGED_INDEX_PREFIX,
    MAX_PLAIN_IDENTITY_LENGTH,
)


def flatten_keys(fields: Iterable[str]) -> str:
    """
    Normalize a set of field paths into an index identity.

    Field paths are sorted by code point and joined with ``;``. Short results
    are returned as-is so identities stay readable in index names; joined
    strings of 120 characters or more are replaced by their MD5 hex digest.

    Args:
        fields: Field paths, in any order

    Returns:
        Identity string shared by every permutation of ``fields``

    Raises:
        ValueError: If no field path is given

    Example:
        >>> flatten_keys(["bob", "alice"])
        'alice;bob'
    """
    ordered = sorted(fields)
    if not ordered:
        raise ValueError("Cannot build an index identity from an empty field list")

    joined = KEY_SEPARATOR.join(ordered)
    if len(joined) < MAX_PLAIN_IDENTITY_LENGTH:
        return joined

    return hashlib.md5(joined.encode("utf-8")).hexdigest()


def managed_index_name(identity: str) -> str:
    """Return the reserved index name for an identity."""
    return f"{MANAGED_INDEX_PREFIX}{identity}"


def index_identity(index: Mapping[str, Any]) -> str:
    """
    Compute the identity of an index document returned by ``listIndexes``.

    Only the field names of the ``key`` document are used; directions and
    index types (text, 2dsphere, ...) are ignored.
    """
    return flatten_keys(index.get("key", {}).keys())


def build_index_keys(fields: Sequence[str]) -> list[tuple[str, int]]:
    """
    Build an all-ascending compound key specification.

    Fields are ordered the same way as in the identity, so every permutation
    of a field combination yields the same index. ``fields`` is not modified.
    """
    return [(field, ASCENDING) for field in sorted(fields)]


def filter_indexes(stats: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """
    Select the usage statistics of managed indexes.

    Matches any name starting with ``di`` (deliberately looser than the
    ``di:`` naming prefix). Entries are returned unmodified and in order.

    Args:
        stats: ``$indexStats`` documents

    Returns:
        New list holding only the managed entries
    """
    return [
        stat
        for stat in stats
        if str(stat.get("name", "")).startswith(MANAGED_INDEX_FILTER_PREFIX)
    ]


def utc_now_like(reference: datetime) -> datetime:
    """
    Current UTC time, naive or aware to match ``reference``.

    PyMongo decodes dates as naive UTC datetimes unless the client was
    created with ``tz_aware=True``.
    """
    now = datetime.now(timezone.utc)
    if reference.tzinfo is None:
        return now.replace(tzinfo=None)
    return now


def usage_frequency(
    ops: int,
    since: datetime,
    interval: timedelta,
    now: datetime | None = None,
) -> float:
    """
    Number of accesses per ``interval`` observed since ``since``.

    Args:
        ops: Access counter reported by ``$indexStats``
        since: Start of the observation window
        interval: Length of one usage window
        now: Current time (defaults to the current UTC time)

    Returns:
        Accesses per window. ``inf`` when no time has elapsed yet (or
        ``since`` lies in the future), so brand-new indexes are never stale.
    """
    if now is None:
        now = utc_now_like(since)

    windows = (now - since) / interval
    # A future ``since`` (clock skew) keeps the index instead of dropping it.
    if windows <= 0:
        return math.inf

    return ops / windows
