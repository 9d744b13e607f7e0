"""
FastAPI dependency injection: settings and the engine handle.

Usage in routers::

    from fastsearch.api.deps import Engines

    @router.get("/search")
    def search(engines: Engines, input: str | None = None):
        ...

Manifesto:
    Singletons (settings, store connections) are created once; routers
    only ever receive the immutable :class:`LookupEngines` handle.

Tags:
    fast-search, api, dependency-injection
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from fastsearch.core.settings import FastSearchSettings, get_settings
from fastsearch.index.factory import LookupEngines


def get_engines(request: Request) -> LookupEngines:
    """The engine handle built by the application lifespan."""
    return request.app.state.engines


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[FastSearchSettings, Depends(get_settings)]
Engines = Annotated[LookupEngines, Depends(get_engines)]
