from __future__ import annotations

from fastapi import APIRouter, Request

from quota_guard.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check with limiter size and admission counters."""
    store = request.app.state.rate_limit_store
    metrics = getattr(request.app.state, "metrics", None)
    if metrics:
        stats = await metrics.get_stats()
        uptime = stats.pop("uptime_seconds", 0.0)
    else:
        stats = {}
        uptime = 0.0

    return HealthResponse(
        status="ok",
        uptime_seconds=uptime,
        tracked_keys=store.size(),
        sweeper_running=store.sweeper.running,
        metrics=stats,
    )
