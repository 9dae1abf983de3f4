"""Tests for API server middleware."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from api.server.middleware import SECURITY_HEADERS, SecurityHeadersMiddleware, SlashNormalizationMiddleware
from api.server.rate_limit import RateLimitMiddleware, TokenBucket

if TYPE_CHECKING:
    from starlette.requests import Request


async def _echo_path(request: Request) -> JSONResponse:
    return JSONResponse({"path": request.url.path})


def _app(*middleware) -> Starlette:
    app = Starlette(
        routes=[
            Route("/items", _echo_path, methods=["GET"]),
            Route("/api/health", _echo_path, methods=["GET"]),
        ],
    )
    for cls, kwargs in middleware:
        app.add_middleware(cls, **kwargs)
    return app


class TestSlashNormalization:
    def test_trailing_slash_routes_without_redirect(self):
        client = TestClient(_app((SlashNormalizationMiddleware, {})))
        response = client.get("/items/", follow_redirects=False)

        assert response.status_code == 200
        assert response.json() == {"path": "/items"}

    def test_root_untouched(self):
        client = TestClient(_app((SlashNormalizationMiddleware, {})))
        assert client.get("/").status_code == 404


class TestSecurityHeaders:
    def test_headers_added(self):
        client = TestClient(_app((SecurityHeadersMiddleware, {})))
        response = client.get("/items")

        for name, value in SECURITY_HEADERS:
            assert response.headers[name.decode()] == value.decode()

    def test_headers_added_to_errors(self):
        client = TestClient(_app((SecurityHeadersMiddleware, {})))
        assert client.get("/missing").headers["x-frame-options"] == "DENY"


class TestTokenBucket:
    def test_allows_burst_then_blocks(self):
        with patch("api.server.rate_limit.time") as mock_time:
            mock_time.monotonic.return_value = 100.0
            bucket = TokenBucket(rate=1.0, burst=3)
            assert [bucket.consume() for _ in range(4)] == [True, True, True, False]

    def test_refills_over_time(self):
        with patch("api.server.rate_limit.time") as mock_time:
            mock_time.monotonic.return_value = 100.0
            bucket = TokenBucket(rate=1.0, burst=1)
            assert bucket.consume()
            assert not bucket.consume()
            assert not bucket.is_full()

            mock_time.monotonic.return_value = 101.5
            assert bucket.is_full()
            assert bucket.consume()


class TestRateLimitMiddleware:
    def _client(self, max_requests: int = 2) -> TestClient:
        return TestClient(
            _app(
                (
                    RateLimitMiddleware,
                    {
                        "max_requests": max_requests,
                        "window_seconds": 900,
                        "exempt_paths": frozenset({"/api/health"}),
                    },
                ),
            ),
        )

    def test_rejects_after_budget(self):
        client = self._client()
        assert client.get("/items").status_code == 200
        assert client.get("/items").status_code == 200

        response = client.get("/items")
        assert response.status_code == 429
        assert response.json() == {"success": False, "message": "Too many requests, please try again later"}

    def test_exempt_paths_not_counted(self):
        client = self._client(max_requests=1)
        for _ in range(5):
            assert client.get("/api/health").status_code == 200
        assert client.get("/items").status_code == 200

    def test_prunes_idle_clients_when_full(self):
        middleware = RateLimitMiddleware(_app(), max_requests=5, window_seconds=60)
        with patch("api.server.rate_limit.MAX_TRACKED_CLIENTS", 2):
            middleware._bucket_for("a")
            middleware._bucket_for("b").consume()
            middleware._bucket_for("c")

        assert "a" not in middleware._buckets
        assert "b" in middleware._buckets
        assert "c" in middleware._buckets
