from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from quota_guard.limiter.entry import Decision, WindowEntry
from quota_guard.limiter.policies import Policy
from quota_guard.limiter.sweeper import ExpirySweeper

logger = structlog.get_logger()

DEFAULT_SHARD_COUNT = 16
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0
DEFAULT_RETENTION_SECONDS = 3600.0


@dataclass
class _Shard:
    lock: threading.Lock = field(default_factory=threading.Lock)
    entries: dict[str, WindowEntry] = field(default_factory=dict)


class RateLimitStore:
    """In-memory sliding window rate limiter shared by every request handler.

    Keys are spread over lock-striped shards: a check holds only its own
    shard's lock, so the filter-then-append sequence is atomic per key while
    keys on other shards proceed in parallel.

    Window arithmetic runs on a monotonic clock so wall-clock steps cannot
    reorder a key's admissions; ``reset_at`` alone is reported in wall time.

    The expiry sweeper starts with the store. Call ``shutdown()`` once when
    the process stops.
    """

    def __init__(
        self,
        *,
        shard_count: int = DEFAULT_SHARD_COUNT,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] | None = None,
        wall_clock: Callable[[], float] | None = None,
        start_sweeper: bool = True,
    ) -> None:
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self._shards = [_Shard() for _ in range(shard_count)]
        self._retention_seconds = retention_seconds
        self._clock = clock or time.monotonic
        self._wall_clock = wall_clock or time.time
        self._sweeper = ExpirySweeper(self.sweep, interval_seconds=sweep_interval_seconds)
        if start_sweeper:
            self._sweeper.start()

    @property
    def sweeper(self) -> ExpirySweeper:
        return self._sweeper

    def now(self) -> float:
        """Wall-clock time, the same scale as ``Decision.reset_at``."""
        return self._wall_clock()

    def check(self, key: str, policy: Policy) -> Decision:
        """Record a request for ``key`` if ``policy`` still has capacity."""
        shard = self._shard_for(key)
        with shard.lock:
            now = self._clock()
            entry = shard.entries.get(key)
            if entry is None:
                entry = WindowEntry(created_at=now)
                shard.entries[key] = entry

            entry.window_seconds = policy.window_seconds
            entry.prune(now - policy.window_seconds)

            allowed = len(entry.timestamps) < policy.max_requests
            if allowed:
                entry.timestamps.append(now)

            return self._decide(entry.timestamps, policy, now, allowed)

    def peek(self, key: str, policy: Policy) -> Decision:
        """Quota status the next ``check`` would start from, without recording a request."""
        shard = self._shard_for(key)
        with shard.lock:
            now = self._clock()
            entry = shard.entries.get(key)
            if entry is None:
                return self._decide([], policy, now, True)
            window_start = now - policy.window_seconds
            live = [t for t in entry.timestamps if t > window_start]
            return self._decide(live, policy, now, len(live) < policy.max_requests)

    def sweep(self, now: float | None = None) -> int:
        """Remove idle entries older than the retention period.

        An entry is removed only when it holds no instants inside its last
        window and was created more than ``retention_seconds`` ago.
        Returns the number of removed keys.
        """
        if now is None:
            now = self._clock()
        removed = 0
        for shard in self._shards:
            with shard.lock:
                stale: list[str] = []
                for key, entry in shard.entries.items():
                    entry.prune(now - entry.window_seconds)
                    if not entry.timestamps and now - entry.created_at > self._retention_seconds:
                        stale.append(key)
                for key in stale:
                    del shard.entries[key]
                removed += len(stale)
        if removed:
            logger.info("rate_limit_sweep", removed=removed, remaining=self.size())
        return removed

    def size(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total

    def clear(self) -> None:
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    def shutdown(self) -> None:
        """Stop the sweeper and drop all tracked state."""
        self._sweeper.stop()
        self.clear()

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def _decide(
        self, timestamps: list[float], policy: Policy, now: float, allowed: bool
    ) -> Decision:
        # Window instants are monotonic; only reset_at is moved onto the wall clock
        oldest = timestamps[0] if timestamps else now
        expires_in = oldest + policy.window_seconds - now
        return Decision(
            allowed=allowed,
            remaining=max(0, policy.max_requests - len(timestamps)),
            limit=policy.max_requests,
            reset_at=self._wall_clock() + expires_in,
        )
