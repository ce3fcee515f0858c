"""Pydantic request/response schemas for the API."""

from app.schemas.auth import (
    MessageResponse,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    ResetPasswordRequest,
)
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.invitation import (
    InvitationAcceptRequest,
    InvitationAcceptResponse,
    InvitationCreateRequest,
    InvitationCreateResponse,
    InvitationPublic,
    InvitationVerifyRequest,
    InvitationVerifyResponse,
)

__all__ = [
    "HealthResponse",
    "InvitationAcceptRequest",
    "InvitationAcceptResponse",
    "InvitationCreateRequest",
    "InvitationCreateResponse",
    "InvitationPublic",
    "InvitationVerifyRequest",
    "InvitationVerifyResponse",
    "MessageResponse",
    "PasswordResetRequest",
    "PasswordResetRequestResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "ResetPasswordRequest",
]
