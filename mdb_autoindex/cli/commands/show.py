"""
Show command for CLI.

Displays the usage of every managed index of a collection.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import click

from ...config import WatcherConfig
from ..utils import format_usage_output, interval_from_days, run_with_watcher


@click.command()
@click.argument("collection")
@click.option(
    "--interval-days",
    type=float,
    default=None,
    help="Usage window in days (defaults to the configured cleanup interval)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format",
)
@click.pass_obj
def show(
    config: WatcherConfig, collection: str, interval_days: float | None, output_format: str
) -> None:
    """
    Show access frequency of the managed indexes of a collection.

    COLLECTION: Name of the collection to inspect

    Examples:
        mdb-autoindex show orders
        mdb-autoindex show orders --interval-days 1 --format json
    """
    interval = interval_from_days(config, interval_days)
    report = run_with_watcher(config, collection, lambda watcher: watcher.usage_report(interval))
    click.echo(format_usage_output(report, output_format))
