from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass
class WindowEntry:
    """Admission history for one rate-limit key.

    ``timestamps`` holds monotonic instants and is only ever appended to,
    so it stays in chronological order. ``window_seconds`` remembers the window of the last policy that
    checked this key so the sweeper can prune it without the policy.
    """

    created_at: float
    timestamps: list[float] = field(default_factory=list)
    window_seconds: float = 0.0

    def prune(self, window_start: float) -> None:
        """Drop instants at or before ``window_start``."""
        if self.timestamps and self.timestamps[0] <= window_start:
            self.timestamps = [t for t in self.timestamps if t > window_start]


@dataclass(frozen=True)
class Decision:
    allowed: bool
    remaining: int
    limit: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until one unit of capacity frees up."""
        wait = math.ceil(self.reset_at - now)
        if self.allowed:
            return max(0, wait)
        return max(1, wait)
