from __future__ import annotations

from pydantic import BaseModel, Field


class AdmissionRequest(BaseModel):
    policy: str = Field(..., min_length=1, description="Name of the policy to check against")
    key: str | None = Field(
        default=None,
        min_length=1,
        max_length=512,
        description="Explicit rate-limit key; derived from the caller when omitted",
    )
