from __future__ import annotations

from fastapi import APIRouter, Request

from quota_guard.models.responses import PolicyListResponse, PolicyResponse

router = APIRouter()


@router.get("/policies", response_model=PolicyListResponse)
async def list_policies(request: Request) -> PolicyListResponse:
    registry = request.app.state.policy_registry
    return PolicyListResponse(
        policies=[
            PolicyResponse(
                name=policy.name,
                max_requests=policy.max_requests,
                window_seconds=policy.window_seconds,
            )
            for policy in registry
        ]
    )
