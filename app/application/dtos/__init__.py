"""Application DTOs (no ORM dependency)."""

from app.application.dtos.account import AccountCreate, AccountResult
from app.application.dtos.flows import (
    InvitationDetails,
    InvitationSent,
    PasswordResetRequestResult,
)
from app.application.dtos.session import SessionSnapshot
from app.application.dtos.token import IssuedToken, RedemptionResult, VerificationResult

__all__ = [
    "AccountCreate",
    "AccountResult",
    "InvitationDetails",
    "InvitationSent",
    "IssuedToken",
    "PasswordResetRequestResult",
    "RedemptionResult",
    "SessionSnapshot",
    "VerificationResult",
]
