from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quota_guard.errors import RateLimitExceeded
from quota_guard.models.responses import ThrottledResponse

logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        body = ThrottledResponse(
            message=f"Rate limit exceeded. Please try again in {exc.retry_after} seconds.",
            retry_after=exc.retry_after,
        )
        return JSONResponse(status_code=429, content=body.model_dump(), headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", method=request.method, path=request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
