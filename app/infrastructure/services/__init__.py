"""Infrastructure services: email notification senders and template rendering."""

from app.infrastructure.services.email_template_renderer import EmailTemplateRenderer
from app.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
    ResendNotificationService,
)

__all__ = [
    "EmailTemplateRenderer",
    "LogOnlyNotificationService",
    "ResendNotificationService",
]
