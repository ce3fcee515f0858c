"""Password reset API schemas. JSON field names are camelCase (aliases)."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class PasswordResetRequest(BaseModel):
    """Request body for POST /auth/password-reset."""

    email: EmailStr = Field(..., description="Account email; the response never reveals whether it exists")


class PasswordResetRequestResponse(BaseModel):
    """Identical for known and unknown emails. reset_link only in development."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    reset_link: str | None = Field(default=None, alias="resetLink")


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1, description="Token from the reset link")
    new_password: str = Field(..., min_length=1, alias="newPassword")


class MessageResponse(BaseModel):
    """Generic success envelope."""

    success: bool = True
    message: str
