"""
Utility functions for CLI commands.

This module provides shared utilities for CLI operations.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

import click

from ..config import WatcherConfig
from ..core.connection import ConnectionManager
from ..exceptions import AutoIndexError
from ..indexes import IndexUsage, Watcher

T = TypeVar("T")


def interval_from_days(config: WatcherConfig, interval_days: float | None) -> timedelta:
    """Usage window from a ``--interval-days`` option, falling back to the config."""
    if interval_days is None:
        return config.cleanup_interval
    if interval_days <= 0:
        raise click.BadParameter("must be greater than 0", param_hint="--interval-days")
    return timedelta(days=interval_days)


def run_with_watcher(
    config: WatcherConfig,
    collection_name: str,
    action: Callable[[Watcher], Awaitable[T]],
) -> T:
    """
    Connect, build a watcher for ``collection_name`` and run ``action`` on it.

    Raises:
        click.ClickException: If connecting or any index operation fails
    """

    async def _run() -> T:
        async with ConnectionManager(config) as connection:
            watcher = Watcher(connection.get_collection(collection_name), config=config)
            await watcher.refresh()
            return await action(watcher)

    try:
        return asyncio.run(_run())
    except AutoIndexError as e:
        raise click.ClickException(str(e)) from e


def format_usage_output(report: list[IndexUsage], format_type: str) -> str:
    """
    Format a usage report for output.

    Args:
        report: Usage of each managed index
        format_type: Output format ('json' or 'table')

    Returns:
        Formatted string representation
    """
    if format_type == "json":
        return json.dumps([usage.to_dict() for usage in report], indent=2, default=str)

    if not report:
        return "No managed indexes."

    lines = [f"{'NAME':<40} {'OPS':>8} {'SINCE':<20} {'FREQ/WINDOW':>12}  STALE"]
    for usage in report:
        lines.append(
            f"{usage.name:<40} {usage.ops:>8} "
            f"{usage.since.strftime('%Y-%m-%d %H:%M:%S'):<20} "
            f"{_format_frequency(usage.frequency):>12}  {'yes' if usage.stale else 'no'}"
        )
    return "\n".join(lines)


def _format_frequency(frequency: Any) -> str:
    if frequency == float("inf"):
        return "inf"
    return f"{frequency:.3f}"
