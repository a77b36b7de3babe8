from fastapi import FastAPI
from fastapi.testclient import TestClient

from payroll_app.core.middleware import (
    RateLimitingMiddleware,
    RequestSizeMiddleware,
    RequestTrackingMiddleware,
    SecurityHeadersMiddleware,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def build_app(**rate_limit_options):
    app = FastAPI()

    @app.get("/api/v1/ping")
    async def ping():
        return {"ok": True}

    @app.post("/api/v1/echo")
    async def echo():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RateLimitingMiddleware, **rate_limit_options)
    app.add_middleware(RequestSizeMiddleware, max_request_size=100)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTrackingMiddleware)
    return app


def test_rate_limit_applies_to_api_routes_per_window():
    clock = FakeClock()
    client = TestClient(build_app(max_requests=3, window_seconds=900, clock=clock))

    for _ in range(3):
        assert client.get("/api/v1/ping").status_code == 200

    blocked = client.get("/api/v1/ping")
    assert blocked.status_code == 429
    assert blocked.json()["error_code"] == "RATE_LIMIT_EXCEEDED"
    assert blocked.headers["Retry-After"] == "900"

    # Non-API routes are never limited
    assert client.get("/health").status_code == 200

    clock.now += 900
    assert client.get("/api/v1/ping").status_code == 200


def test_request_size_limit():
    client = TestClient(build_app(max_requests=100))

    assert client.post("/api/v1/echo", content=b"x" * 50).status_code == 200

    response = client.post("/api/v1/echo", content=b"x" * 101)
    assert response.status_code == 413
    assert response.json()["error_data"]["max_size"] == 100


def test_tracking_and_security_headers():
    response = TestClient(build_app()).get("/health")

    assert response.headers["X-Request-ID"]
    assert "X-Process-Time" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_rate_limit_forgets_clients_after_their_window():
    clock = FakeClock()
    limiter = RateLimitingMiddleware(FastAPI(), max_requests=3, window_seconds=900, clock=clock)

    for n in range(50):
        limiter._hit(f"10.0.0.{n}")
    assert len(limiter._windows) == 50

    clock.now += 900
    assert limiter._hit("10.0.1.1") == (True, 900)

    assert list(limiter._windows) == ["10.0.1.1"]
