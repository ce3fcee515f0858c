"""Auth API: password reset request and redemption.

Both endpoints are public. The request endpoint answers identically for
known and unknown emails; the redemption endpoint reports every token
problem with one generic message.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from app.api.v1.dependencies import get_link_origin, get_password_reset_service
from app.application.use_cases.credentials import PasswordResetService
from app.core.limiter import check_reset_rate_per_email, limit_auth
from app.schemas.auth import (
    MessageResponse,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    ResetPasswordRequest,
)

router = APIRouter()


@router.post(
    "/password-reset",
    response_model=PasswordResetRequestResponse,
    response_model_exclude_none=True,
)
@limit_auth
async def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
    origin: Annotated[str, Depends(get_link_origin)],
):
    """Issue a reset link if the email has an account. The email goes out after the response."""
    check_reset_rate_per_email(str(body.email))
    result = await service.request_reset(str(body.email), origin)
    if result.deliver is not None:
        background_tasks.add_task(result.deliver)
    return PasswordResetRequestResponse(message=result.message, reset_link=result.reset_link)


@router.post("/reset-password", response_model=MessageResponse)
@limit_auth
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Redeem a reset token and set the new password (400 on weak password or unusable token)."""
    message = await service.reset_password(body.token, body.new_password)
    return MessageResponse(message=message)
