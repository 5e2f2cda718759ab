"""
Command-line entry point for MDB_AUTOINDEX.

This module is part of MDB_AUTOINDEX - MongoDB Dynamic Index Watcher.
"""

import logging

import click

from ..config import WatcherConfig
from ..exceptions import ConfigurationError
from .commands.cleanup import cleanup
from .commands.show import show


@click.group()
@click.option("--uri", envvar="MONGO_URI", default="", help="MongoDB connection URI")
@click.option("--db", "db_name", envvar="DB_NAME", default="", help="Database name")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, uri: str, db_name: str, verbose: bool) -> None:
    """Inspect and clean up dynamically created MongoDB indexes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = WatcherConfig.from_env(mongo_uri=uri or None, db_name=db_name or None)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


cli.add_command(show)
cli.add_command(cleanup)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
