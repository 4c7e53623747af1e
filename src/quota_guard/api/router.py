from __future__ import annotations

from fastapi import APIRouter

from quota_guard.api.admin import router as admin_router
from quota_guard.api.admission import router as admission_router
from quota_guard.api.health import router as health_router
from quota_guard.api.policies import router as policies_router
from quota_guard.api.protected import router as protected_router

api_router = APIRouter()
api_router.include_router(admission_router, tags=["admission"])
api_router.include_router(policies_router, tags=["policies"])
api_router.include_router(protected_router, tags=["protected"])
api_router.include_router(admin_router, tags=["admin"])
api_router.include_router(health_router, tags=["health"])
