"""Invitation API schemas. JSON field names are camelCase (aliases)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.enums import AccountRole


class InvitationCreateRequest(BaseModel):
    """Request body for POST /invitations. All fields required."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    name: str = Field(..., min_length=1)
    role: AccountRole
    department: str = Field(..., min_length=1)
    invited_by: str = Field(..., min_length=1, alias="invitedBy")


class InvitationCreateResponse(BaseModel):
    """Result of issuing an invitation.

    emailSent is false when delivery failed. replacedPending is true when the
    email already had a pending invitation.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    invitation_id: str = Field(..., alias="invitationId")
    email_sent: bool = Field(..., alias="emailSent")
    replaced_pending: bool = Field(default=False, alias="replacedPending")


class InvitationVerifyRequest(BaseModel):
    """Request body for POST /invitations/verify."""

    token: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class InvitationPublic(BaseModel):
    """Invitation fields used to pre-fill the signup form."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    email: str
    name: str | None = None
    role: str | None = None
    department: str | None = None
    invited_by: str | None = Field(default=None, alias="invitedBy")
    expires_at: datetime = Field(..., alias="expiresAt")


class InvitationVerifyResponse(BaseModel):
    """valid=true with invitation, or valid=false with one undifferentiated error."""

    valid: bool
    invitation: InvitationPublic | None = None
    error: str | None = None


class InvitationAcceptRequest(BaseModel):
    """Request body for POST /invitations/accept."""

    token: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class InvitationAcceptResponse(BaseModel):
    """Account materialized from an accepted invitation."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    user_id: str = Field(..., alias="userId")
