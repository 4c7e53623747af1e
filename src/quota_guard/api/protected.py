from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from quota_guard.api.rate_limit import enforce_rate_limit
from quota_guard.limiter.entry import Decision

router = APIRouter()


class ProtectedResponse(BaseModel):
    policy: str
    remaining: int | None


@router.get("/protected/{policy_name}", response_model=ProtectedResponse)
async def protected_resource(
    policy_name: str,
    decision: Decision | None = Depends(enforce_rate_limit()),
) -> ProtectedResponse:
    """Stand-in for a rate limited operation such as checkout or a premium check."""
    return ProtectedResponse(
        policy=policy_name,
        remaining=decision.remaining if decision else None,
    )
