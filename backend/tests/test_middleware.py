"""
NotaryPro Backend — Middleware Tests
======================================

What we test:
    ✅ Sliding window: budget, refusal with Retry-After, window expiry
    ✅ Per-IP isolation and inactive IP cleanup
    ✅ Access log level per status code
    ✅ Request ID echo and generation
"""

import logging

import pytest

from app.exceptions import RateLimitExceededError
from app.middleware.logging import level_for_status
from app.middleware.rate_limit import CLEANUP_EVERY, RateLimitMiddleware


def _limiter(max_requests=3, window_seconds=10):
    return RateLimitMiddleware(app=None, max_requests=max_requests, window_seconds=window_seconds)


class TestRateLimit:
    def test_allows_up_to_budget(self):
        limiter = _limiter()
        for offset in range(3):
            limiter.check("10.0.0.1", 100.0 + offset)

    def test_refuses_over_budget(self):
        limiter = _limiter()
        for offset in range(3):
            limiter.check("10.0.0.1", 100.0 + offset)

        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.check("10.0.0.1", 103.0)

        # Oldest request (t=100) leaves the window at t=110
        assert exc_info.value.retry_after == 8
        assert exc_info.value.context["retry_after"] == 8

    def test_refused_request_is_not_counted(self):
        limiter = _limiter(max_requests=1)
        limiter.check("10.0.0.1", 100.0)
        for _ in range(5):
            with pytest.raises(RateLimitExceededError):
                limiter.check("10.0.0.1", 101.0)
        assert len(limiter._requests["10.0.0.1"]) == 1

    def test_window_slides(self):
        limiter = _limiter()
        for offset in range(3):
            limiter.check("10.0.0.1", 100.0 + offset)

        limiter.check("10.0.0.1", 110.5)

    def test_ips_are_independent(self):
        limiter = _limiter(max_requests=1)
        limiter.check("10.0.0.1", 100.0)
        limiter.check("10.0.0.2", 100.0)

    def test_cleanup_drops_inactive_ips(self):
        limiter = _limiter(max_requests=CLEANUP_EVERY + 1, window_seconds=10)
        limiter.check("10.0.0.99", 0.0)
        for i in range(CLEANUP_EVERY - 1):
            limiter.check("10.0.0.1", 50.0 + i * 0.001)

        assert "10.0.0.99" not in limiter._requests
        assert "10.0.0.1" in limiter._requests


class TestAccessLogLevel:
    @pytest.mark.parametrize(
        "status,level",
        [
            (200, logging.INFO),
            (201, logging.INFO),
            (304, logging.INFO),
            (404, logging.WARNING),
            (409, logging.WARNING),
            (500, logging.ERROR),
            (503, logging.ERROR),
        ],
    )
    def test_level(self, status, level):
        assert level_for_status(status) == level


class TestRequestId:
    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_generated_when_missing(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_overlong_id_is_truncated(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "x" * 200})
        assert response.headers["X-Request-ID"] == "x" * 64
