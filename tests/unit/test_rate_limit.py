"""Unit tests for the fixed window rate limiter."""

from unittest.mock import patch

import pytest

from app.rate_limit import FixedWindowRateLimiter

pytestmark = pytest.mark.unit


class TestFixedWindowRateLimiter:
    def test_allows_up_to_max_then_blocks(self):
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60)

        results = [limiter.consume("ip:1") for _ in range(4)]

        assert [allowed for allowed, _, _ in results] == [True, True, True, False]
        assert [remaining for _, _, remaining in results] == [2, 1, 0, 0]
        assert results[-1][1] >= 1

    def test_clients_are_independent(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60)

        assert limiter.consume("ip:1")[0]
        assert limiter.consume("ip:2")[0]
        assert not limiter.consume("ip:1")[0]

    def test_window_resets(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=10)

        with patch("app.rate_limit.time.monotonic", return_value=100.0):
            assert limiter.consume("ip:1")[0]
            assert not limiter.consume("ip:1")[0]
        with patch("app.rate_limit.time.monotonic", return_value=110.0):
            assert limiter.consume("ip:1")[0]

    def test_retry_after_counts_down(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900)

        with patch("app.rate_limit.time.monotonic", return_value=0.0):
            limiter.consume("ip:1")
        with patch("app.rate_limit.time.monotonic", return_value=300.0):
            _, retry_after, _ = limiter.consume("ip:1")

        assert retry_after == 600

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(max_requests=0, window_seconds=60)
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(max_requests=1, window_seconds=0)


class TestRateLimitMiddleware:
    def test_101st_request_is_rejected(self, open_client):
        for _ in range(100):
            assert open_client.get("/employees").status_code == 200

        response = open_client.get("/employees")

        assert response.status_code == 429
        assert int(response.headers["retry-after"]) >= 1
        assert response.headers["x-ratelimit-limit"] == "100"
        assert response.headers["x-ratelimit-remaining"] == "0"
        assert response.json()["code"] == "RATE_LIMITED"

    def test_headers_on_allowed_requests(self, open_client):
        response = open_client.get("/employees")

        assert response.headers["x-ratelimit-limit"] == "100"
        assert response.headers["x-ratelimit-remaining"] == "99"

    def test_healthz_is_exempt(self, build_client):
        client = build_client(auth_enabled=False, rate_limit_max_requests=1)

        for _ in range(5):
            assert client.get("/healthz").status_code == 200
        assert client.get("/employees").status_code == 200
        assert client.get("/employees").status_code == 429

    def test_disabled_when_max_is_zero(self, build_client):
        client = build_client(auth_enabled=False, rate_limit_max_requests=0)

        response = client.get("/employees")

        assert "x-ratelimit-limit" not in response.headers

    def test_forwarded_for_only_when_trusted(self, build_client):
        def status(client, ip):
            return client.get("/employees", headers={"X-Forwarded-For": ip}).status_code

        untrusted = build_client(auth_enabled=False, rate_limit_max_requests=1)
        assert status(untrusted, "1.1.1.1") == 200
        assert status(untrusted, "2.2.2.2") == 429

        trusted = build_client(
            auth_enabled=False, rate_limit_max_requests=1, rate_limit_trust_proxy=True
        )
        assert status(trusted, "1.1.1.1") == 200
        assert status(trusted, "2.2.2.2") == 200
