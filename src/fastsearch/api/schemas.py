"""
API schemas: search response and RFC 7807 errors.

Every search endpoint returns either :class:`SearchResponse` (200) or
:class:`ProblemDetail` (4xx/5xx).

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SearchResponse(BaseModel):
    """Autocomplete candidates for one query.

    UI Hints:
        Render ``results`` in order; they are already sorted.
        ``duration`` is server-side lookup time in milliseconds.
    """

    results: list[str] = Field(default_factory=list, description="Complete terms, sentinel stripped")
    duration: float = Field(default=0.0, description="Lookup time in milliseconds")


class ErrorDetail(BaseModel):
    """Structured error detail for field-level errors."""

    code: str = Field(description="Machine-readable error code (e.g., 'INVALID_INPUT')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``INVALID_INPUT`` (400): Query missing or blank
        - ``NOT_FOUND`` (404): Lookup path not configured
        - ``RATE_LIMITED`` (503): Backend throttled the lookup
        - ``TRANSIENT`` / ``UNAVAILABLE`` (503): Backend failed, retry later
        - ``INTERNAL`` (500): Unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "No input provided",
            "status": 400,
            "detail": "",
            "instance": "/api/search",
            "errors": [{"code": "INVALID_INPUT", "message": "No input provided", "field": "input"}]
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(default_factory=list, description="Field-level error details")
