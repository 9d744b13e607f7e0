"""
CLI layer for fast-search.

Provides a Typer application for serving the API, bulk-loading a
vocabulary, and running one-off lookups from the terminal.

Entry point::

    fast-search --help
"""

from fastsearch.cli.app import app

__all__ = ["app"]
