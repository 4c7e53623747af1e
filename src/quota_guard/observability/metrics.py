from __future__ import annotations

import asyncio
import time
from collections import defaultdict


class AdmissionMetrics:
    """In-memory counters for admission decisions."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._lock = asyncio.Lock()
        self._start_time = time.monotonic()

    async def record_decision(self, policy_name: str, allowed: bool) -> None:
        outcome = "allowed" if allowed else "denied"
        async with self._lock:
            self._counters[f"rate_limit_{outcome}"] += 1
            self._counters[f"rate_limit_{outcome}.{policy_name}"] += 1

    async def get_stats(self) -> dict[str, int | float]:
        async with self._lock:
            stats: dict[str, int | float] = dict(self._counters)
        stats["uptime_seconds"] = round(time.monotonic() - self._start_time, 1)
        return stats
