from __future__ import annotations

import json
from typing import Any

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from quota_guard.limiter.policies import PolicyLimits


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    json_logs: bool | None = None

    # Rate limit store
    shard_count: int = Field(default=16, ge=1)
    sweep_interval_seconds: float = Field(default=60.0, gt=0)
    retention_seconds: float = Field(default=3600.0, gt=0)

    # Caller identity
    trust_user_header: bool = False

    # Overrides and additions to the default policies, keyed by policy name
    rate_limit_policies: dict[str, PolicyLimits] = Field(default_factory=dict)

    @field_validator("rate_limit_policies", mode="before")
    @classmethod
    def parse_policies(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v)
        return v


def get_settings() -> Settings:
    return Settings()
