from __future__ import annotations


class QuotaGuardError(Exception):
    """Base class for errors raised by quota_guard."""


class ConfigurationError(QuotaGuardError, ValueError):
    """Invalid policy or registry configuration, raised at startup."""


class UnknownPolicyError(QuotaGuardError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown rate limit policy: {self.name}"


class RateLimitExceeded(QuotaGuardError):
    """Raised by the HTTP layer when a request is denied admission.

    The limiter itself never raises on denial; this only carries the quota
    metadata to the 429 handler.
    """

    def __init__(self, policy_name: str, retry_after: int, headers: dict[str, str]) -> None:
        super().__init__(f"Rate limit exceeded for policy {policy_name!r}")
        self.policy_name = policy_name
        self.retry_after = retry_after
        self.headers = headers
