from __future__ import annotations

import structlog
from fastapi import APIRouter, Request

from quota_guard.models.responses import ClearResponse

logger = structlog.get_logger()

router = APIRouter()


@router.post("/admin/rate-limits/clear", response_model=ClearResponse)
async def clear_rate_limits(request: Request) -> ClearResponse:
    """Drop all tracked rate limit state."""
    store = request.app.state.rate_limit_store
    cleared = store.size()
    store.clear()
    logger.warning("rate_limits_cleared", cleared=cleared)
    return ClearResponse(message="Rate limit state cleared", cleared=cleared)
