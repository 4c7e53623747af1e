"""Admission checks for request handlers.

Handlers either depend on ``enforce_rate_limit(...)`` or call ``admit``
directly. Both run the store check, record the outcome, and attach the
X-RateLimit-* headers; denial raises ``RateLimitExceeded`` which the error
handlers turn into a 429.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from fastapi import HTTPException, Request, Response

from quota_guard.api.headers import rate_limit_headers, throttled_headers
from quota_guard.api.keys import resolve_key
from quota_guard.errors import RateLimitExceeded, UnknownPolicyError
from quota_guard.limiter.entry import Decision
from quota_guard.limiter.policies import Policy

logger = structlog.get_logger()


def get_policy(request: Request, name: str) -> Policy:
    registry = request.app.state.policy_registry
    try:
        return registry.get(name)
    except UnknownPolicyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


async def admit(request: Request, response: Response, policy: Policy, key: str) -> Decision:
    """Check ``key`` against ``policy``; raise RateLimitExceeded when denied."""
    store = request.app.state.rate_limit_store
    decision = store.check(key, policy)

    metrics = getattr(request.app.state, "metrics", None)
    if metrics:
        await metrics.record_decision(policy.name, decision.allowed)

    if not decision.allowed:
        retry_after = decision.retry_after(store.now())
        logger.info(
            "rate_limit_exceeded",
            key=key,
            policy=policy.name,
            retry_after=retry_after,
        )
        raise RateLimitExceeded(
            policy.name,
            retry_after=retry_after,
            headers=throttled_headers(decision, retry_after),
        )

    response.headers.update(rate_limit_headers(decision))
    return decision


def enforce_rate_limit(
    policy_name: str | None = None,
    key_prefix: str | None = None,
    use_ip_fallback: bool = True,
) -> Callable[[Request, Response], Awaitable[Decision | None]]:
    """Build a FastAPI dependency that rate limits the route it guards.

    With ``policy_name`` unset, the policy is taken from the route's
    ``policy_name`` path parameter. ``key_prefix`` defaults to the policy
    name so every operation gets its own key space. Requests with no
    resolvable caller are let through.
    """

    async def dependency(request: Request, response: Response) -> Decision | None:
        name = policy_name or request.path_params.get("policy_name", "")
        policy = get_policy(request, name)
        settings = request.app.state.settings
        key = resolve_key(
            request,
            key_prefix or policy.name,
            use_ip_fallback=use_ip_fallback,
            trust_user_header=settings.trust_user_header,
        )
        if key is None:
            logger.warning("rate_limit_no_identifier", policy=policy.name, path=request.url.path)
            return None
        return await admit(request, response, policy, key)

    return dependency
