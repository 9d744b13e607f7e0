"""
CLI utility helpers: consoles, settings loading, and error output.
"""

from __future__ import annotations

from typing import Any, NoReturn

import typer
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console
from rich.table import Table

from fastsearch.core.errors import FastSearchError
from fastsearch.core.settings import FastSearchSettings

console = Console()
err_console = Console(stderr=True)


def load_settings(**overrides: Any) -> FastSearchSettings:
    """Build settings from the environment plus non-``None`` CLI overrides."""
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return FastSearchSettings(**values)
    except SettingsValidationError as exc:
        err_console.print("[bold red]Invalid configuration[/bold red]")
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "settings"
            err_console.print(f"  {location}: {error['msg']}")
        raise typer.Exit(code=2) from exc


def fail(exc: FastSearchError) -> NoReturn:
    """Print a typed error and exit non-zero."""
    err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
    raise typer.Exit(code=1) from exc


def print_mapping(data: dict[str, Any], *, title: str = "") -> None:
    """Render a flat mapping as a two-column Rich table."""
    table = Table(title=title or None, show_header=False, pad_edge=False)
    table.add_column("key", style="bold")
    table.add_column("value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)
