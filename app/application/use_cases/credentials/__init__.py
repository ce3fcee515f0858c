"""Credential flows built on single-use tokens."""

from app.application.use_cases.credentials.invitations import InvitationService
from app.application.use_cases.credentials.links import (
    build_reset_link,
    build_signup_link,
    describe_ttl,
)
from app.application.use_cases.credentials.password_reset import (
    PasswordResetService,
    check_password_strength,
)

__all__ = [
    "InvitationService",
    "PasswordResetService",
    "build_reset_link",
    "build_signup_link",
    "check_password_strength",
    "describe_ttl",
]
