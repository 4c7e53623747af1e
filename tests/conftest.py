from __future__ import annotations

from collections.abc import Iterator

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from quota_guard.limiter.policies import Policy
from quota_guard.limiter.store import RateLimitStore


class FakeClock:
    """Manually advanced clock for driving the sliding window in tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_policy(max_requests: int = 3, window_seconds: float = 60, name: str = "test") -> Policy:
    return Policy(name=name, max_requests=max_requests, window_seconds=window_seconds)


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for testing."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("JSON_LOGS", "true")
    monkeypatch.delenv("RATE_LIMIT_POLICIES", raising=False)
    monkeypatch.delenv("TRUST_USER_HEADER", raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1_000.0)


@pytest.fixture
def store(clock: FakeClock) -> Iterator[RateLimitStore]:
    """Store on a fake clock with the background sweeper left off."""
    s = RateLimitStore(
        clock=clock, wall_clock=clock, retention_seconds=3600, start_sweeper=False
    )
    yield s
    s.shutdown()


@pytest.fixture
async def app():
    """Create a test FastAPI app from the current environment."""
    from quota_guard.app import create_app

    test_app = create_app()
    yield test_app


@pytest.fixture
async def client(app) -> AsyncClient:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with LifespanManager(app):
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
