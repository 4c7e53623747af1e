from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from quota_guard.limiter.entry import Decision
from quota_guard.limiter.policies import Policy


class DecisionResponse(BaseModel):
    key: str | None
    policy: str
    allowed: bool
    remaining: int
    limit: int
    reset_at: datetime

    @classmethod
    def from_decision(cls, decision: Decision, policy: Policy, key: str | None) -> DecisionResponse:
        return cls(
            key=key,
            policy=policy.name,
            allowed=decision.allowed,
            remaining=decision.remaining,
            limit=decision.limit,
            reset_at=datetime.fromtimestamp(decision.reset_at, tz=timezone.utc),
        )


class PolicyResponse(BaseModel):
    name: str
    max_requests: int
    window_seconds: float


class PolicyListResponse(BaseModel):
    policies: list[PolicyResponse]


class ThrottledResponse(BaseModel):
    error: str = "Too many requests"
    message: str
    retry_after: int


class ClearResponse(BaseModel):
    message: str
    cleared: int


class HealthResponse(BaseModel):
    status: str
    uptime_seconds: float
    tracked_keys: int
    sweeper_running: bool
    metrics: dict[str, Any]
