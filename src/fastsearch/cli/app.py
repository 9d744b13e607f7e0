"""
Root Typer application for the fast-search CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from fastsearch.core.logging import configure_logging

app = Typer(
    name="fast-search",
    help="fast-search: prefix autocomplete over a static vocabulary.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from fastsearch import __version__

        typer.echo(f"fast-search {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """fast-search CLI: serve, load, and query the autocomplete index."""
    configure_logging(level="DEBUG" if verbose else "WARNING", json_format=False)


# ── Command registration ─────────────────────────────────────────────────

from fastsearch.cli.config import config  # noqa: E402
from fastsearch.cli.index import load, lookup  # noqa: E402
from fastsearch.cli.serve import serve  # noqa: E402

app.command("serve", help="Start the API server.")(serve)
app.command("load", help="Bulk-load a vocabulary file.")(load)
app.command("lookup", help="Run one lookup.")(lookup)
app.command("config", help="Show effective settings.")(config)
