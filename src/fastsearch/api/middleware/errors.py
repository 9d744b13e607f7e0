"""
Error-handling middleware: maps fast-search errors to RFC 7807 responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from fastsearch.api.schemas import ErrorDetail, ProblemDetail
from fastsearch.core.errors import FastSearchError, is_retryable
from fastsearch.core.logging import get_logger

logger = get_logger(__name__)

# ── Error code → HTTP status mapping ─────────────────────────────────────

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "VALIDATION_FAILED": 400,
    "INVALID_INPUT": 400,
    "RATE_LIMITED": 503,
    "TRANSIENT": 503,
    "UNAVAILABLE": 503,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
    )
    if errors:
        body.errors = [ErrorDetail(**e) for e in errors]
    return JSONResponse(status_code=status, content=body.model_dump(), headers=headers)


async def fastsearch_exception_handler(request: Request, exc: FastSearchError) -> JSONResponse:
    """Map a typed error to its status; never leaks partial results."""
    status = status_for_error_code(exc.code)
    retry = exc.retry_after is not None and is_retryable(exc)
    headers = {"Retry-After": str(exc.retry_after)} if retry else None

    if status >= 500:
        logger.warning("request_failed", path=request.url.path, status=status, **exc.to_dict())
        debug = request.app.state.settings.debug
        title = "Backend unavailable" if status == 503 else "Internal Server Error"
        detail = exc.message if debug else "The search backend could not complete the lookup."
    else:
        title = exc.message
        detail = ""

    return problem_response(
        status=status,
        title=title,
        detail=detail,
        instance=str(request.url),
        errors=[{"code": exc.code, "message": exc.message, "field": getattr(exc, "field", None)}],
        headers=headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: returns 500 with ProblemDetail."""
    logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )
