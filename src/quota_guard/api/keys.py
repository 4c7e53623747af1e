from __future__ import annotations

from fastapi import Request

# Checked in order; the first header present wins.
_FORWARDED_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "x-vercel-forwarded-for")


def get_client_ip(request: Request) -> str | None:
    """Best-effort client address, preferring reverse-proxy headers."""
    for header in _FORWARDED_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # x-forwarded-for may list several hops; the client is the first
            first = value.split(",")[0].strip()
            if first:
                return first
    return request.client.host if request.client else None


def get_user_id(request: Request, trust_user_header: bool = False) -> str | None:
    """Caller identity resolved by an upstream auth layer, if any."""
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return str(user_id)
    if trust_user_header:
        return request.headers.get("x-user-id") or None
    return None


def rate_limit_key(
    prefix: str,
    user_id: str | None = None,
    client_ip: str | None = None,
) -> str | None:
    """Build a key that cannot collide across operations or identity types."""
    if user_id:
        return f"{prefix}:user:{user_id}"
    if client_ip:
        return f"{prefix}:ip:{client_ip}"
    return None


def resolve_key(
    request: Request,
    prefix: str,
    *,
    use_ip_fallback: bool = True,
    trust_user_header: bool = False,
) -> str | None:
    user_id = get_user_id(request, trust_user_header)
    client_ip = get_client_ip(request) if use_ip_fallback and not user_id else None
    return rate_limit_key(prefix, user_id=user_id, client_ip=client_ip)
