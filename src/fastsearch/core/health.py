"""Health check utilities for fast-search.

Provides:
- **Response models**: ``HealthResponse``, ``CheckResult``, ``LivenessResponse``.
- **``HealthCheck``**: a declarative description of a single dependency check
  with ``required`` / ``timeout_s`` knobs.
- **``store_check()``**: wraps a store's blocking ``ping()`` as an async check.
- **``create_health_router()``**: ``/health``, ``/health/ready``, ``/health/live``.

Quick start::

    router = create_health_router(
        service_name="fast-search",
        version="0.2.0",
        checks=[HealthCheck("redis", store_check(index))],
    )
    app.include_router(router)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Module-level start time: set when the service first imports this module.
_START_TIME = time.monotonic()

Status = Literal["healthy", "degraded", "unhealthy"]


# ── Response Models ──────────────────────────────────────────────────────


class CheckResult(BaseModel):
    """Result of a single dependency health check."""

    status: Status
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health response envelope returned from ``GET /health``."""

    status: Status = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = Field(default_factory=lambda: round(time.monotonic() - _START_TIME, 1))
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    checks: dict[str, CheckResult] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Response for liveness probes: always returns ``{"status": "alive"}``."""

    status: str = "alive"


# ── Health Check Definition ──────────────────────────────────────────────


@dataclass
class HealthCheck:
    """Declarative description of a single dependency health check.

    Parameters
    ----------
    name : str
        Dependency name (e.g. ``"redis"``, ``"cloudflare-kv"``).
    check_fn : () -> Awaitable[bool]
        Async callable.  Should return ``True`` or raise on failure.
    required : bool
        If *True* (default), failure makes the overall status ``unhealthy``.
        If *False*, failure only causes ``degraded``.
    timeout_s : float
        Max seconds to wait before the check is considered failed.
    """

    name: str
    check_fn: Callable[[], Awaitable[bool]]
    required: bool = True
    timeout_s: float = 5.0


def store_check(store: Any) -> Callable[[], Awaitable[bool]]:
    """Run a store's blocking ``ping()`` off the event loop."""

    async def _check() -> bool:
        return await asyncio.to_thread(store.ping)

    return _check


# ── Internal helpers ─────────────────────────────────────────────────────


async def _run_checks(checks: list[HealthCheck]) -> dict[str, CheckResult]:
    """Execute all checks in parallel and return a mapping of name → result."""

    async def _one(hc: HealthCheck) -> tuple[str, CheckResult]:
        start = time.monotonic()
        try:
            await asyncio.wait_for(hc.check_fn(), timeout=hc.timeout_s)
            elapsed = (time.monotonic() - start) * 1000
            return hc.name, CheckResult(status="healthy", latency_ms=round(elapsed, 2))
        except TimeoutError:
            return hc.name, CheckResult(status="unhealthy", error="timeout")
        except Exception as exc:  # noqa: BLE001
            elapsed = (time.monotonic() - start) * 1000
            return hc.name, CheckResult(
                status="unhealthy",
                latency_ms=round(elapsed, 2),
                error=str(exc)[:200],
            )

    pairs = await asyncio.gather(*[_one(hc) for hc in checks])
    return dict(pairs)


def _compute_status(check_results: dict[str, CheckResult], checks: list[HealthCheck]) -> Status:
    """Derive aggregate status from individual check results."""
    check_map = {hc.name: hc for hc in checks}
    any_required_down = False
    any_optional_down = False

    for name, result in check_results.items():
        if result.status != "healthy":
            hc = check_map.get(name)
            if hc and hc.required:
                any_required_down = True
            else:
                any_optional_down = True

    if any_required_down:
        return "unhealthy"
    if any_optional_down:
        return "degraded"
    return "healthy"


# ── Router Factory ───────────────────────────────────────────────────────


def create_health_router(
    service_name: str,
    version: str,
    checks: list[HealthCheck] | Callable[[], list[HealthCheck]] | None = None,
    prefix: str = "/health",
) -> APIRouter:
    """Create an ``APIRouter`` with health, readiness and liveness endpoints.

    *checks* may be a callable so that checks can be resolved lazily, after
    the lifespan hook has created the stores they probe.
    """
    router = APIRouter(tags=["health"])

    def _resolve() -> list[HealthCheck]:
        if callable(checks):
            return checks()
        return checks or []

    def _make_response(status: Status, check_results: dict[str, CheckResult]) -> HealthResponse:
        return HealthResponse(
            status=status,
            service=service_name,
            version=version,
            checks=check_results,
        )

    @router.get(prefix, response_model=HealthResponse)
    async def health() -> JSONResponse:
        """Primary health: runs all dependency checks."""
        active = _resolve()
        check_results = await _run_checks(active)
        status = _compute_status(check_results, active)
        code = 503 if status == "unhealthy" else 200
        return JSONResponse(content=_make_response(status, check_results).model_dump(), status_code=code)

    @router.get(f"{prefix}/ready", response_model=HealthResponse)
    async def readiness() -> JSONResponse:
        """Readiness probe: 503 if any dependency is down."""
        active = _resolve()
        check_results = await _run_checks(active)
        status = _compute_status(check_results, active)
        code = 503 if status != "healthy" else 200
        return JSONResponse(content=_make_response(status, check_results).model_dump(), status_code=code)

    @router.get(f"{prefix}/live", response_model=LivenessResponse)
    async def liveness() -> LivenessResponse:
        """Liveness probe: always 200 if the process is running."""
        return LivenessResponse()

    return router


__all__ = [
    "CheckResult",
    "HealthResponse",
    "LivenessResponse",
    "HealthCheck",
    "store_check",
    "create_health_router",
]
