"""
Command-line interface for MDB_AUTOINDEX.
"""

from .main import cli, main

__all__ = ["cli", "main"]
