"""
Search router: prefix autocomplete over the configured stores.

Endpoints:
    GET /search?input=           Default lookup path (``FASTSEARCH_BACKEND``)
    GET /search/ordered?input=   Ordered-index path (sorted set rank/range)
    GET /search/kv?input=        Prefix-scan path (key listing)

Handlers are plain ``def`` so FastAPI runs them in its threadpool; the
store clients are blocking and pooled.

Tags:
    fast-search, api, search, autocomplete

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from fastsearch.api.deps import Engines
from fastsearch.api.middleware.errors import problem_response
from fastsearch.api.schemas import ProblemDetail, SearchResponse
from fastsearch.core.settings import BackendKind

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ProblemDetail, "description": "Missing or blank input"},
    404: {"model": ProblemDetail, "description": "Lookup path not configured"},
    503: {"model": ProblemDetail, "description": "Backend unavailable"},
}

InputQuery = Query(None, description="Partial query text (case-insensitive)")


def _search(engines: Engines, kind: BackendKind | None, raw: str | None) -> SearchResponse | JSONResponse:
    engine = engines.get(kind)
    if engine is None:
        return problem_response(
            status=404,
            title="Lookup path not configured",
            detail=f"No store is configured for the {(kind or engines.default).value!r} path.",
            errors=[{"code": "NOT_FOUND", "message": "Lookup path not configured"}],
        )
    result = engine.lookup(raw)
    return SearchResponse(results=result.results, duration=round(result.elapsed_ms, 3))


@router.get("/search", response_model=SearchResponse, responses=_ERROR_RESPONSES)
def search(engines: Engines, input: str | None = InputQuery):
    """Autocomplete using the default lookup path."""
    return _search(engines, None, input)


@router.get("/search/ordered", response_model=SearchResponse, responses=_ERROR_RESPONSES)
def search_ordered(engines: Engines, input: str | None = InputQuery):
    """Autocomplete using the ordered-index store."""
    return _search(engines, BackendKind.ORDERED, input)


@router.get("/search/kv", response_model=SearchResponse, responses=_ERROR_RESPONSES)
def search_kv(engines: Engines, input: str | None = InputQuery):
    """Autocomplete using the prefix-scan key store."""
    return _search(engines, BackendKind.PREFIX, input)
