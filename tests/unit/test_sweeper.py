from __future__ import annotations

import threading
import time

import pytest

from quota_guard.limiter.store import RateLimitStore
from quota_guard.limiter.sweeper import ExpirySweeper
from tests.conftest import FakeClock, make_policy


def test_sweep_removes_idle_old_entry(store: RateLimitStore, clock: FakeClock) -> None:
    store.check("old", make_policy(window_seconds=60))
    clock.advance(3601)
    assert store.sweep() == 1
    assert store.size() == 0


def test_sweep_keeps_recent_entry_with_empty_window(store: RateLimitStore, clock: FakeClock) -> None:
    store.check("recent", make_policy(window_seconds=1))
    clock.advance(5)
    # Window is empty but the entry is well inside the retention period
    assert store.sweep() == 0
    assert store.size() == 1


def test_sweep_keeps_old_entry_with_live_timestamps(store: RateLimitStore, clock: FakeClock) -> None:
    policy = make_policy(max_requests=100, window_seconds=60)
    store.check("busy", policy)
    clock.advance(3590)
    store.check("busy", policy)
    clock.advance(20)
    # Created over an hour ago, but the last admission is still in its window
    assert store.sweep() == 0
    assert store.size() == 1


def test_sweep_uses_each_entry_window(store: RateLimitStore, clock: FakeClock) -> None:
    store.check("short", make_policy(window_seconds=10))
    store.check("long", make_policy(window_seconds=7200))
    clock.advance(3700)
    assert store.sweep() == 1
    assert store.peek("long", make_policy(window_seconds=7200)).remaining == 2
    assert store.size() == 1


def test_sweep_explicit_now(store: RateLimitStore) -> None:
    store.check("k", make_policy(window_seconds=60))
    assert store.sweep(now=1_000.0 + 10) == 0
    assert store.sweep(now=1_000.0 + 3601) == 1


def test_swept_key_starts_fresh(store: RateLimitStore, clock: FakeClock) -> None:
    policy = make_policy(max_requests=1, window_seconds=60)
    store.check("k", policy)
    clock.advance(3601)
    store.sweep()
    decision = store.check("k", policy)
    assert decision.allowed is True
    assert decision.remaining == 0


def test_sweeper_runs_periodically() -> None:
    ran = threading.Event()
    calls = []

    def sweep() -> int:
        calls.append(1)
        if len(calls) >= 2:
            ran.set()
        return 0

    sweeper = ExpirySweeper(sweep, interval_seconds=0.01)
    sweeper.start()
    try:
        assert ran.wait(timeout=5)
    finally:
        sweeper.stop()
    assert sweeper.running is False


def test_sweeper_survives_failing_sweep() -> None:
    def broken() -> int:
        raise RuntimeError("boom")

    sweeper = ExpirySweeper(broken, interval_seconds=60)
    assert sweeper.run_once() == 0


def test_sweeper_start_is_idempotent() -> None:
    sweeper = ExpirySweeper(lambda: 0, interval_seconds=60)
    sweeper.start()
    first = sweeper._thread
    sweeper.start()
    assert sweeper._thread is first
    sweeper.stop()
    sweeper.stop()
    assert sweeper.running is False


def test_sweeper_rejects_bad_interval() -> None:
    with pytest.raises(ValueError):
        ExpirySweeper(lambda: 0, interval_seconds=0)


def test_store_sweeper_reclaims_entries() -> None:
    clock = FakeClock(start=0.0)
    store = RateLimitStore(clock=clock, sweep_interval_seconds=0.01, retention_seconds=10)
    try:
        store.check("k", make_policy(window_seconds=1))
        clock.advance(60)
        for _ in range(500):
            if store.size() == 0:
                break
            time.sleep(0.01)
        assert store.size() == 0
    finally:
        store.shutdown()
