"""
REST API layer for fast-search.

Provides a FastAPI application factory whose search endpoints delegate
to :class:`fastsearch.core.lookup.LookupEngine`.  This package handles
only HTTP transport concerns: query parameters, CORS, error mapping and
request context.

Quick start::

    from fastsearch.api import create_app

    app = create_app()  # ready for uvicorn

Tags:
    fast-search, api, REST, FastAPI, transport-layer
"""

from fastsearch.api.app import create_app

__all__ = ["create_app"]
