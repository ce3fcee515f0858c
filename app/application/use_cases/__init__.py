"""Application use cases: one entry point per workflow."""

from app.application.use_cases.credentials import (
    InvitationService,
    PasswordResetService,
)

__all__ = [
    "InvitationService",
    "PasswordResetService",
]
