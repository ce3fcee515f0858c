"""Middleware hardening: request id, security headers, body size limit, reset rate limit."""

from httpx import AsyncClient

from app.core.limiter import RESET_PER_EMAIL_LIMIT, limiter, reset_rate_limits


async def test_request_id_is_echoed_when_safe(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123_DEF"})
    assert response.headers["X-Request-ID"] == "abc-123_DEF"


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    """Values outside [A-Za-z0-9_-] are not reflected (log injection)."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id;rm -rf"})
    assert response.headers["X-Request-ID"] != "bad id;rm -rf"
    assert len(response.headers["X-Request-ID"]) == 36


async def test_request_id_generated_when_missing(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers.get("X-Request-ID")


async def test_security_headers_present(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/auth/password-reset", json={"email": "nobody@example.com"}
    )
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["Referrer-Policy"] == "no-referrer"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


async def test_oversized_body_rejected_with_413(client: AsyncClient) -> None:
    payload = b'{"email": "' + b"a" * (1024 * 1024 + 10) + b'@example.com"}'
    response = await client.post(
        "/api/v1/auth/password-reset",
        content=payload,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json()["code"] == "PAYLOAD_TOO_LARGE"


async def test_reset_requests_rate_limited_per_email(client: AsyncClient) -> None:
    """The per-address limit also applies to addresses without an account."""
    limiter.enabled = True
    limiter.reset()
    reset_rate_limits()
    try:
        for _ in range(RESET_PER_EMAIL_LIMIT):
            ok = await client.post(
                "/api/v1/auth/password-reset", json={"email": "nobody@example.com"}
            )
            assert ok.status_code == 200
        limited = await client.post(
            "/api/v1/auth/password-reset", json={"email": "nobody@example.com"}
        )
        assert limited.status_code == 429
        assert limited.json()["code"] == "HTTP_ERROR"
    finally:
        limiter.enabled = False
        limiter.reset()
        reset_rate_limits()
