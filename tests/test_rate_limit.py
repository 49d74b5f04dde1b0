from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies import create_access_token
from app.api.middleware.rate_limit_middleware import RateLimitMiddleware


def _app(max_requests: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60.0)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


def _bearer(subject: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': subject})}"}


def test_requests_beyond_window_limit_get_429() -> None:
    client = TestClient(_app(max_requests=3))

    statuses = [client.get("/api/ping").status_code for _ in range(4)]

    assert statuses == [200, 200, 200, 429]
    blocked = client.get("/api/ping")
    assert blocked.status_code == 429
    assert int(blocked.headers["Retry-After"]) >= 1


def test_authenticated_users_are_counted_separately() -> None:
    client = TestClient(_app(max_requests=1))

    assert client.get("/api/ping", headers=_bearer("user-a")).status_code == 200
    assert client.get("/api/ping", headers=_bearer("user-b")).status_code == 200
    assert client.get("/api/ping", headers=_bearer("user-a")).status_code == 429


def test_rotating_invalid_tokens_share_the_address_limit() -> None:
    client = TestClient(_app(max_requests=2))

    codes = [
        client.get("/api/ping", headers={"Authorization": f"Bearer junk{i}"}).status_code
        for i in range(5)
    ]

    assert codes == [200, 200, 429, 429, 429]


def test_expired_clients_are_forgotten() -> None:
    limiter = RateLimitMiddleware(FastAPI(), max_requests=5, window_seconds=60.0)
    limiter.request_times = {"ip:old": [100.0], "ip:fresh": [150.0], "ip:empty": []}

    limiter.sweep(current_time=170.0)

    assert set(limiter.request_times) == {"ip:fresh"}
    assert limiter.last_sweep == 170.0


def test_non_api_paths_and_disabled_limiter_are_not_limited() -> None:
    client = TestClient(_app(max_requests=1))
    assert [client.get("/health").status_code for _ in range(3)] == [200, 200, 200]

    unlimited = TestClient(_app(max_requests=0))
    assert [unlimited.get("/api/ping").status_code for _ in range(3)] == [200, 200, 200]
