"""
CLI: ``fast-search load`` and ``fast-search lookup``.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

import typer

from fastsearch.cli.utils import console, fail, load_settings
from fastsearch.core.errors import FastSearchError
from fastsearch.core.settings import BackendKind, FastSearchSettings, OrderedStore, PrefixStore
from fastsearch.core.terms import read_vocabulary
from fastsearch.index.factory import build_engines, create_key_store, create_ordered_index
from fastsearch.index.loader import load_vocabulary


class LoadTarget(str, Enum):
    ORDERED = "ordered"
    PREFIX = "prefix"
    BOTH = "both"


def _persistent(settings: FastSearchSettings, field: str) -> bool:
    """In-memory stores live only as long as this process; skip them."""
    if getattr(settings, field) in (OrderedStore.MEMORY, PrefixStore.MEMORY):
        console.print(f"[yellow]Skipping {field}=memory (filled from vocabulary_path at startup).[/yellow]")
        return False
    return True


def load(
    vocabulary: Path = typer.Argument(..., exists=True, dir_okay=False, help="One term per line"),
    target: LoadTarget = typer.Option(LoadTarget.BOTH, "--target", "-t", help="Stores to (re)load"),
    prefixes: bool = typer.Option(False, "--prefixes", help="Also store prefix-only nodes"),
) -> None:
    """Bulk-load a vocabulary file into the configured stores."""
    settings = load_settings()
    terms = read_vocabulary(vocabulary)

    load_ordered = target != LoadTarget.PREFIX and _persistent(settings, "ordered_store")
    load_prefix = target != LoadTarget.ORDERED and _persistent(settings, "prefix_store")

    ordered_index = create_ordered_index(settings) if load_ordered else None
    key_store = create_key_store(settings) if load_prefix else None
    if ordered_index is None and key_store is None:
        console.print("[yellow]No store configured for this target; nothing loaded.[/yellow]")
        raise typer.Exit(code=1)

    try:
        report = load_vocabulary(
            terms,
            ordered_index=ordered_index,
            key_store=key_store,
            sentinel=settings.sentinel,
            include_prefixes=prefixes,
        )
    except FastSearchError as exc:
        fail(exc)
    finally:
        for store in (ordered_index, key_store):
            if store is not None:
                store.close()

    console.print(f"[bold green]Loaded[/bold green] {report.terms} terms ({report.entries} entries)")
    for name, count in sorted(report.stored.items()):
        console.print(f"  {name}: {count}")


def lookup(
    query: str = typer.Argument(..., help="Partial query text"),
    backend: BackendKind | None = typer.Option(None, "--backend", "-b", help="Lookup path"),
    as_json: bool = typer.Option(False, "--json", help="Print the API response body"),
) -> None:
    """Run one lookup against the configured stores."""
    settings = load_settings(backend=backend)

    try:
        engines = build_engines(settings)
    except FastSearchError as exc:
        fail(exc)

    try:
        result = engines.get().lookup(query)
    except FastSearchError as exc:
        fail(exc)
    finally:
        engines.close()

    if as_json:
        console.print_json(json.dumps({"results": result.results, "duration": round(result.elapsed_ms, 3)}))
        return

    if not result.results:
        console.print("[dim]No matches.[/dim]")
    for term in result.results:
        console.print(term, markup=False, highlight=False)
    console.print(f"\n[dim]{len(result.results)} results from {result.backend} in {result.elapsed_ms:.2f} ms[/dim]")
