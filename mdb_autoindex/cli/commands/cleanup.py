"""
Cleanup command for CLI.

Runs the usage-based reaper on a collection.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import click

from ...config import WatcherConfig
from ..utils import interval_from_days, run_with_watcher


@click.command()
@click.argument("collection")
@click.option(
    "--interval-days",
    type=float,
    default=None,
    help="Usage window in days (defaults to the configured cleanup interval)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Only list the indexes that would be dropped",
)
@click.pass_obj
def cleanup(
    config: WatcherConfig, collection: str, interval_days: float | None, dry_run: bool
) -> None:
    """
    Drop managed indexes used less than once per usage window.

    COLLECTION: Name of the collection to clean up

    Examples:
        mdb-autoindex cleanup orders
        mdb-autoindex cleanup orders --interval-days 30 --dry-run
    """
    interval = interval_from_days(config, interval_days)

    if dry_run:
        report = run_with_watcher(
            config, collection, lambda watcher: watcher.usage_report(interval)
        )
        names = [usage.name for usage in report if usage.stale]
        verb = "Would drop"
    else:
        names = run_with_watcher(config, collection, lambda watcher: watcher.cleanup(interval))
        verb = "Dropped"

    if not names:
        click.echo(click.style(f"✅ No unused managed indexes on '{collection}'.", fg="green"))
        return

    click.echo(f"{verb} {len(names)} index(es) on '{collection}':")
    for name in names:
        click.echo(f"  - {name}")
