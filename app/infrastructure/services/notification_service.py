"""Email notification senders: log-only (default) and Resend REST API."""

from __future__ import annotations

import logging

import httpx

from app.domain.exceptions import NotificationDeliveryException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of sending email.

    Use when no provider is configured (development, tests). Bodies are only
    logged at DEBUG because they contain one-time links.
    """

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> None:
        """Log the notification; no actual email sent."""
        recipients = list(to_emails or [])
        subject_preview = (subject or "")[:80]
        if not recipients:
            logger.info("Notify: no recipients, skipping send (subject=%r)", subject_preview)
            return
        logger.info(
            "Notify: would send to %d recipients (subject=%r)",
            len(recipients),
            subject_preview,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Notify recipients: %s (at %s)",
                recipients,
                utc_now().isoformat(),
            )
            logger.debug("Notify body (first 500 chars): %s", (body or "")[:500])


class ResendNotificationService:
    """INotificationService over the Resend REST API (POST /emails, HTML body).

    Any transport error or non-2xx response raises
    NotificationDeliveryException; callers decide whether that matters.
    """

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        *,
        sender_name: str = "Activity Tracker",
        api_url: str = "https://api.resend.com",
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = f"{sender_name} <{sender_email}>"
        self._endpoint = f"{api_url.rstrip('/')}/emails"
        self._timeout = timeout
        self._http = http_client

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> None:
        recipients = list(to_emails or [])
        if not recipients:
            return
        payload = {"from": self._sender, "to": recipients, "subject": subject, "html": body}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            if self._http is not None:
                response = await self._http.post(
                    self._endpoint, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise NotificationDeliveryException(f"transport error: {type(exc).__name__}") from exc

        if response.is_error:
            message = _error_message(response)
            if "domain" in message.lower():
                message = f"sender domain not verified: {message}"
            raise NotificationDeliveryException(f"HTTP {response.status_code}: {message}")
        email_id = _json_field(response, "id")
        logger.info("Email accepted by Resend (id=%s, recipients=%d)", email_id, len(recipients))


def _json_field(response: httpx.Response, key: str) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    value = data.get(key) if isinstance(data, dict) else None
    return str(value) if value is not None else None


def _error_message(response: httpx.Response) -> str:
    return _json_field(response, "message") or response.text[:200] or response.reason_phrase
