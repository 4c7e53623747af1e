from __future__ import annotations

from collections.abc import Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from quota_guard.errors import ConfigurationError, UnknownPolicyError


class PolicyLimits(BaseModel):
    """Capacity and window for one quota rule, as read from configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_requests: int = Field(..., gt=0, description="Requests allowed per window")
    window_seconds: float = Field(..., gt=0, description="Length of the sliding window")


class Policy(PolicyLimits):
    name: str = Field(..., min_length=1)


DEFAULT_POLICIES: dict[str, PolicyLimits] = {
    # Payment abuse: 3 requests per 5 minutes
    "checkout": PolicyLimits(max_requests=3, window_seconds=300),
    "module_access": PolicyLimits(max_requests=30, window_seconds=60),
    "user_stats": PolicyLimits(max_requests=10, window_seconds=60),
    "check_premium": PolicyLimits(max_requests=20, window_seconds=60),
    "leaderboard": PolicyLimits(max_requests=60, window_seconds=60),
}


class PolicyRegistry:
    """Read-only set of named policies, assembled once at startup."""

    def __init__(self, policies: Mapping[str, Policy]) -> None:
        for name, policy in policies.items():
            if name != policy.name:
                raise ConfigurationError(
                    f"Policy registered as {name!r} is named {policy.name!r}"
                )
        self._policies: dict[str, Policy] = dict(policies)

    @classmethod
    def from_limits(
        cls,
        limits: Mapping[str, PolicyLimits | Mapping[str, object]],
    ) -> PolicyRegistry:
        policies: dict[str, Policy] = {}
        for name, value in limits.items():
            raw = (
                value.model_dump(exclude={"name"})
                if isinstance(value, PolicyLimits)
                else dict(value)
            )
            try:
                policies[name] = Policy(name=name, **raw)
            except (ValidationError, TypeError) as exc:
                raise ConfigurationError(f"Invalid rate limit policy {name!r}: {exc}") from exc
        return cls(policies)

    @classmethod
    def with_defaults(
        cls,
        overrides: Mapping[str, PolicyLimits | Mapping[str, object]] | None = None,
    ) -> PolicyRegistry:
        """Default policies, with ``overrides`` replacing or adding entries by name."""
        merged: dict[str, PolicyLimits | Mapping[str, object]] = dict(DEFAULT_POLICIES)
        merged.update(overrides or {})
        return cls.from_limits(merged)

    def get(self, name: str) -> Policy:
        try:
            return self._policies[name]
        except KeyError:
            raise UnknownPolicyError(name) from None

    def names(self) -> list[str]:
        return sorted(self._policies)

    def __contains__(self, name: object) -> bool:
        return name in self._policies

    def __iter__(self) -> Iterator[Policy]:
        return iter(self._policies[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._policies)
