from __future__ import annotations

from datetime import datetime, timezone

from quota_guard.limiter.entry import Decision


def format_reset(reset_at: float) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2025-01-10T12:00:05.000Z."""
    dt = datetime.fromtimestamp(reset_at, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def rate_limit_headers(decision: Decision) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": format_reset(decision.reset_at),
    }


def throttled_headers(decision: Decision, retry_after: int) -> dict[str, str]:
    headers = rate_limit_headers(decision)
    headers["Retry-After"] = str(retry_after)
    return headers
