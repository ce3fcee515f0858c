"""Email senders: Resend REST API client and the log-only fallback."""

import json
import logging

import httpx
import pytest

from app.domain.exceptions import NotificationDeliveryException
from app.infrastructure.services import LogOnlyNotificationService, ResendNotificationService


def _resend(handler) -> ResendNotificationService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ResendNotificationService(
        "re_test_key",
        "noreply@tracker.example",
        sender_name="Tracker",
        api_url="https://api.resend.test/",
        http_client=client,
    )


async def test_resend_posts_html_email() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "email-1"})

    await _resend(handler).send(["a@example.com"], "Subject", "<p>Body</p>")

    [request] = captured
    assert str(request.url) == "https://api.resend.test/emails"
    assert request.headers["Authorization"] == "Bearer re_test_key"
    assert json.loads(request.content) == {
        "from": "Tracker <noreply@tracker.example>",
        "to": ["a@example.com"],
        "subject": "Subject",
        "html": "<p>Body</p>",
    }


async def test_resend_unverified_domain_is_explained() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"message": "The tracker.example domain is not verified"})

    with pytest.raises(NotificationDeliveryException) as exc_info:
        await _resend(handler).send(["a@example.com"], "S", "B")
    assert exc_info.value.details["reason"].startswith("HTTP 403: sender domain not verified")


async def test_resend_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(NotificationDeliveryException) as exc_info:
        await _resend(handler).send(["a@example.com"], "S", "B")
    assert exc_info.value.details["reason"] == "transport error: ReadTimeout"


async def test_resend_skips_empty_recipients() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    await _resend(handler).send([], "S", "B")


async def test_log_only_never_raises(caplog) -> None:
    caplog.set_level(logging.INFO)
    await LogOnlyNotificationService().send(["a@example.com"], "Hello", "<p>secret link</p>")
    assert "would send to 1 recipients" in caplog.text
    assert "secret link" not in caplog.text
