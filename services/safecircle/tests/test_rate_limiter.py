# pytest services/safecircle/tests/test_rate_limiter.py -q

from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from libs.rate_limiter import RateLimiter, get_client_key

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _request(headers=None, host="10.0.0.1"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host) if host else None,
    )


class TestClientKey:
    def test_first_forwarded_hop_wins(self):
        request = _request({"x-forwarded-for": " 203.0.113.7 , 10.0.0.2"})
        assert get_client_key(request) == "203.0.113.7"

    def test_falls_back_to_peer(self):
        assert get_client_key(_request()) == "10.0.0.1"

    def test_unknown_when_no_peer(self):
        assert get_client_key(_request(host=None)) == "unknown"


class TestFixedWindow:
    def test_allows_up_to_max_then_blocks(self):
        limiter = RateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

        assert [limiter.hit("a") for _ in range(4)] == [True, True, True, False]

    def test_clients_are_counted_separately(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

        assert limiter.hit("a") is True
        assert limiter.hit("b") is True
        assert limiter.hit("a") is False

    def test_new_window_after_expiry(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.hit("a")
        assert limiter.hit("a") is False

        clock.now += 61
        assert limiter.hit("a") is True

    def test_reset_clears_counts(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()

        assert limiter.hit("a") is True

    def test_idle_clients_are_pruned(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=5, window_seconds=60, clock=clock)
        limiter.hit("idle")

        clock.now += 121
        limiter.hit("active")

        assert "idle" not in limiter._entries
        assert "active" in limiter._entries


def test_dependency_returns_429_with_error_code():
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=FakeClock())
    app = FastAPI()

    @app.post("/ping", dependencies=[Depends(limiter)])
    async def ping():
        return {"ok": True}

    client = TestClient(app)
    assert client.post("/ping").status_code == 200
    assert client.post("/ping").status_code == 200

    r = client.post("/ping")
    assert r.status_code == 429
    assert r.json() == {"detail": {"error": "rate_limited"}}

    # A different forwarded client still gets through
    assert client.post("/ping", headers={"X-Forwarded-For": "198.51.100.9"}).status_code == 200
