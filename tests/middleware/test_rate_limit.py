"""
Tests for the /api/** rate limiting middleware
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.rate_limit import RateLimitMiddleware


class FakeMonotonic:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def limiter_setup():
    clock = FakeMonotonic()
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=3, window_s=60.0, clock=clock)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return TestClient(app), clock


def test_allows_requests_under_limit(limiter_setup):
    client, _ = limiter_setup

    responses = [client.get("/api/ping") for _ in range(3)]

    assert all(r.status_code == 200 for r in responses)
    assert responses[0].headers["RateLimit-Limit"] == "3"
    assert responses[-1].headers["RateLimit-Remaining"] == "0"


def test_rejects_over_limit(limiter_setup):
    client, _ = limiter_setup
    for _ in range(3):
        client.get("/api/ping")

    response = client.get("/api/ping")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"


def test_window_slides(limiter_setup):
    client, clock = limiter_setup
    for _ in range(3):
        client.get("/api/ping")

    clock.now += 61

    assert client.get("/api/ping").status_code == 200


def test_non_api_routes_are_not_limited(limiter_setup):
    client, _ = limiter_setup

    responses = [client.get("/health") for _ in range(10)]

    assert all(r.status_code == 200 for r in responses)


def _request(host: str, path: str = "/api/ping") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "root_path": "",
        "scheme": "http",
        "server": ("testserver", 80),
        "client": (host, 1234),
        "headers": [],
        "query_string": b"",
    })


async def _ok(_request):
    return Response()


@pytest.mark.asyncio
async def test_idle_clients_are_swept():
    """Addresses that stopped sending do not stay in the hit table forever"""
    clock = FakeMonotonic()
    limiter = RateLimitMiddleware(FastAPI(), max_requests=3, window_s=60.0, clock=clock)

    for i in range(50):
        await limiter.dispatch(_request(f"10.0.0.{i}"), _ok)
    assert len(limiter._hits) == 50

    clock.now += 61
    response = await limiter.dispatch(_request("10.0.1.1"), _ok)

    assert response.status_code == 200
    assert list(limiter._hits) == ["10.0.1.1"]


@pytest.mark.asyncio
async def test_sweep_keeps_clients_still_in_window():
    clock = FakeMonotonic()
    limiter = RateLimitMiddleware(FastAPI(), max_requests=3, window_s=60.0, clock=clock)

    await limiter.dispatch(_request("10.0.0.1"), _ok)
    clock.now += 30
    await limiter.dispatch(_request("10.0.0.2"), _ok)
    clock.now += 40
    await limiter.dispatch(_request("10.0.0.3"), _ok)

    assert set(limiter._hits) == {"10.0.0.2", "10.0.0.3"}
