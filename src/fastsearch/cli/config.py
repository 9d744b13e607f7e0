"""
CLI: ``fast-search config``: show effective settings.
"""

from __future__ import annotations

import json

import typer

from fastsearch.cli.utils import console, load_settings, print_mapping


def config(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show effective settings (secrets redacted)."""
    data = load_settings().redacted()
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    print_mapping(data, title="fast-search settings")
