"""
CLI: ``fast-search serve``: start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from fastsearch.cli.utils import console, load_settings


def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address [FASTSEARCH_HOST]"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port [FASTSEARCH_PORT]"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of workers"),
) -> None:
    """Start the fast-search REST API server."""
    settings = load_settings(host=host, port=port)

    console.print(
        f"[bold green]Starting fast-search API[/bold green] on {settings.host}:{settings.port}"
        f" ([cyan]{settings.backend.value}[/cyan] backend)"
    )
    uvicorn.run(
        "fastsearch.api:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
    )
