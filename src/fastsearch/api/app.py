"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers, and
lifespan events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root.  Store connections
    are opened in the lifespan hook, handed to routers as one immutable
    handle, and closed on shutdown.

Tags:
    fast-search, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fastsearch.api.middleware.errors import fastsearch_exception_handler, unhandled_exception_handler
from fastsearch.api.middleware.request_id import RequestIDMiddleware
from fastsearch.api.middleware.timing import TimingMiddleware
from fastsearch.core.errors import FastSearchError
from fastsearch.core.health import HealthCheck, create_health_router, store_check
from fastsearch.core.logging import configure_logging, get_logger
from fastsearch.core.settings import FastSearchSettings, get_settings
from fastsearch.index.factory import LookupEngines, build_engines


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: open stores on startup, close on shutdown."""
    settings: FastSearchSettings = app.state.settings
    log = get_logger("fastsearch.api")
    log.info("fast-search API starting", version=app.version, backend=settings.backend.value)

    owns_engines = getattr(app.state, "engines", None) is None
    if owns_engines:
        app.state.engines = build_engines(settings)

    yield

    if owns_engines:
        app.state.engines.close()
    log.info("fast-search API shutting down")


def _health_checks(app: FastAPI) -> list[HealthCheck]:
    engines: LookupEngines | None = getattr(app.state, "engines", None)
    if engines is None:
        return []
    timeout_s = app.state.settings.timeout_s
    return [
        HealthCheck(store.name, store_check(store), timeout_s=timeout_s + 1)
        for store in (engines.ordered_index, engines.key_store)
        if store is not None
    ]


def create_app(
    *,
    settings: FastSearchSettings | None = None,
    engines: LookupEngines | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : FastSearchSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    engines : LookupEngines | None
        Pre-built engines (useful for testing).  When ``None`` they are
        built from *settings* during startup and closed at shutdown.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.engines = engines
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(FastSearchError, fastsearch_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from fastsearch.api.routers import search

    app.include_router(
        create_health_router("fast-search", settings.api_version, checks=lambda: _health_checks(app)),
        tags=["health"],
    )
    app.include_router(search.router, prefix=settings.api_prefix, tags=["search"])

    return app
