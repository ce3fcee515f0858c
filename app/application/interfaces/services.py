"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.session import SessionSnapshot


# Notification sink interface
class INotificationService(Protocol):
    """Protocol for outbound notifications (email). Opaque sink: notify(recipient, content)."""

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> None:
        """Send a notification. Raises NotificationDeliveryException on failure."""


# Email template interface
class IEmailTemplateRenderer(Protocol):
    """Protocol for rendering notification subject and body from a template key."""

    def render(self, template_key: str, context: dict[str, Any]) -> tuple[str, str]:
        """Return (subject, body). Raises KeyError for an unknown key."""


# Identity provider interface
class IIdentityProvider(Protocol):
    """Protocol for the external identity provider used by the session guard."""

    async def get_session(self) -> SessionSnapshot | None:
        """Return the current session, or None if signed out."""

    async def refresh_session(self) -> SessionSnapshot:
        """Refresh the current session. Raises SessionRefreshException on failure."""

    async def sign_out(self) -> None:
        """End the current session locally and at the provider."""
