from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from quota_guard.api.errors import register_error_handlers
from quota_guard.api.router import api_router
from quota_guard.config import Settings, get_settings
from quota_guard.limiter.policies import PolicyRegistry
from quota_guard.limiter.store import RateLimitStore
from quota_guard.logging import setup_logging
from quota_guard.observability.metrics import AdmissionMetrics

logger = structlog.get_logger()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    # Invalid policies raise here, before the app accepts any traffic
    registry = PolicyRegistry.with_defaults(settings.rate_limit_policies)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = RateLimitStore(
            shard_count=settings.shard_count,
            sweep_interval_seconds=settings.sweep_interval_seconds,
            retention_seconds=settings.retention_seconds,
        )

        app.state.settings = settings
        app.state.policy_registry = registry
        app.state.rate_limit_store = store
        app.state.metrics = AdmissionMetrics()
        logger.info("rate_limiter_started", policies=registry.names(), shards=settings.shard_count)

        try:
            yield
        finally:
            store.shutdown()
            logger.info("rate_limiter_stopped")

    app = FastAPI(
        title="Quota Guard",
        version="0.1.0",
        description="In-process sliding window admission control for API routes",
        lifespan=lifespan,
    )
    register_error_handlers(app)
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("quota_guard.app:app", host=settings.app_host, port=settings.app_port)
