"""Pytest configuration and fixtures for the activity tracker credential service.

The app runs on the memory backend with the log-only email sender, so no
fixture needs Postgres or network access. HTTP tests go through
app.main:app over ASGITransport; the process-local backend is replaced
before every test.
"""

import os
import re
from datetime import UTC, datetime, timedelta

os.environ["DATABASE_BACKEND"] = "memory"
os.environ["EMAIL_BACKEND"] = "log"
os.environ["ENVIRONMENT"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import get_notification_service
from app.core.config import get_settings
from app.core.limiter import limiter, reset_rate_limits
from app.domain.exceptions import NotificationDeliveryException
from app.infrastructure.memory import MemoryBackend

get_settings.cache_clear()

from app.main import app  # noqa: E402

limiter.enabled = False

TOKEN_IN_LINK = re.compile(r"token=([A-Za-z0-9_\-]+)")


class FakeClock:
    """Deterministic clock; call it like utc_now()."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingNotifier:
    """INotificationService that keeps every message instead of sending it."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[list[str], str, str]] = []

    async def send(self, to_emails: list[str], subject: str, body: str) -> None:
        self.sent.append((list(to_emails), subject, body))
        if self.fail:
            raise NotificationDeliveryException("HTTP 500: provider down")

    def last_token(self) -> str:
        """Raw token from the most recent message's link."""
        _, _, body = self.sent[-1]
        match = TOKEN_IN_LINK.search(body)
        assert match, "no token link in message body"
        return match.group(1)


@pytest.fixture(autouse=True)
def memory_backend() -> MemoryBackend:
    """Fresh process-local backend and rate-limit windows for each test."""
    backend = MemoryBackend()
    app.state.memory_backend = backend
    app.state.account_events = backend.events
    reset_rate_limits()
    yield backend
    app.state.memory_backend = None
    app.state.account_events = None


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def outbox() -> RecordingNotifier:
    """Capture emails sent by the API instead of logging them."""
    notifier = RecordingNotifier()
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield notifier
    app.dependency_overrides.pop(get_notification_service, None)


@pytest.fixture
def failing_outbox() -> RecordingNotifier:
    """Email provider that records then rejects every message."""
    notifier = RecordingNotifier(fail=True)
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield notifier
    app.dependency_overrides.pop(get_notification_service, None)


@pytest.fixture
def development_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    """ENVIRONMENT=development for one test (reset links returned in responses)."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def alice(memory_backend: MemoryBackend):
    """Existing account alice@example.com / old-password."""
    return await memory_backend.accounts.seed(
        "alice@example.com", "old-password", "Alice", department="Engineering"
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Standalone recording notifier for service-level tests."""
    return RecordingNotifier()
