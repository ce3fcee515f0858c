"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.email_invitation import EmailInvitation
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    TokenRecordMixin,
)
from app.infrastructure.persistence.models.password_reset_token import (
    PasswordResetToken,
)
from app.infrastructure.persistence.models.profile import Profile

__all__ = [
    "CuidMixin",
    "EmailInvitation",
    "PasswordResetToken",
    "Profile",
    "TimestampMixin",
    "TokenRecordMixin",
]
