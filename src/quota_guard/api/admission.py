from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from quota_guard.api.keys import resolve_key
from quota_guard.api.rate_limit import admit, get_policy
from quota_guard.models.requests import AdmissionRequest
from quota_guard.models.responses import DecisionResponse

router = APIRouter()


def _caller_key(request: Request, prefix: str) -> str:
    key = resolve_key(
        request, prefix, trust_user_header=request.app.state.settings.trust_user_header
    )
    if key is None:
        raise HTTPException(status_code=400, detail="Unable to identify caller")
    return key


@router.post("/admission/check", response_model=DecisionResponse)
async def check_admission(
    body: AdmissionRequest, request: Request, response: Response
) -> DecisionResponse:
    """Consume one unit of capacity for a key under the named policy.

    Explicit keys are namespaced by policy name; without one, the key is
    derived from the caller's identity or address. Denied requests get a 429.
    """
    policy = get_policy(request, body.policy)
    if body.key is not None:
        key = f"{policy.name}:{body.key}"
    else:
        key = _caller_key(request, policy.name)
    decision = await admit(request, response, policy, key)
    return DecisionResponse.from_decision(decision, policy, key)


@router.get("/admission/{policy_name}/status", response_model=DecisionResponse)
async def admission_status(policy_name: str, request: Request) -> DecisionResponse:
    """Current quota for the caller without consuming any of it."""
    policy = get_policy(request, policy_name)
    key = _caller_key(request, policy.name)
    decision = request.app.state.rate_limit_store.peek(key, policy)
    return DecisionResponse.from_decision(decision, policy, key)
