"""Invitations API: issue, verify and accept email invitations."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_invitation_service, get_link_origin
from app.application.use_cases.credentials import InvitationService
from app.core.limiter import limit_auth, limit_invites
from app.domain.exceptions import InvitationInvalidException
from app.schemas.invitation import (
    InvitationAcceptRequest,
    InvitationAcceptResponse,
    InvitationCreateRequest,
    InvitationCreateResponse,
    InvitationPublic,
    InvitationVerifyRequest,
    InvitationVerifyResponse,
)

router = APIRouter()

ACCOUNT_CREATED_MESSAGE = "Account created successfully. You can now sign in."


@router.post("", response_model=InvitationCreateResponse, status_code=201)
@limit_invites
async def send_invitation(
    request: Request,
    body: InvitationCreateRequest,
    service: Annotated[InvitationService, Depends(get_invitation_service)],
    origin: Annotated[str, Depends(get_link_origin)],
):
    """Issue an invitation and email the signup link (409 if the email already has an account)."""
    sent = await service.send_invitation(
        email=str(body.email),
        name=body.name,
        role=body.role.value,
        department=body.department,
        invited_by=body.invited_by,
        origin=origin,
    )
    return InvitationCreateResponse(
        message=sent.message,
        invitation_id=sent.invitation_id,
        email_sent=sent.email_sent,
        replaced_pending=sent.replaced_pending,
    )


@router.post(
    "/verify",
    response_model=InvitationVerifyResponse,
    response_model_exclude_none=True,
    responses={400: {"model": InvitationVerifyResponse, "description": "Invalid or expired invitation"}},
)
@limit_auth
async def verify_invitation(
    request: Request,
    body: InvitationVerifyRequest,
    service: Annotated[InvitationService, Depends(get_invitation_service)],
):
    """Return invitation details for a valid (token, email) pair; one generic 400 otherwise."""
    try:
        details = await service.verify_invitation(body.token, body.email)
    except InvitationInvalidException as exc:
        return JSONResponse(
            status_code=400,
            content=InvitationVerifyResponse(valid=False, error=exc.message).model_dump(
                exclude_none=True
            ),
        )
    return InvitationVerifyResponse(
        valid=True,
        invitation=InvitationPublic(
            id=details.id,
            email=details.email,
            name=details.name,
            role=details.role,
            department=details.department,
            invited_by=details.invited_by,
            expires_at=details.expires_at,
        ),
    )


@router.post("/accept", response_model=InvitationAcceptResponse, status_code=201)
@limit_auth
async def accept_invitation(
    request: Request,
    body: InvitationAcceptRequest,
    service: Annotated[InvitationService, Depends(get_invitation_service)],
):
    """Redeem the invitation and create the account in one step."""
    account = await service.accept_invitation(body.token, body.email, body.password)
    return InvitationAcceptResponse(message=ACCOUNT_CREATED_MESSAGE, user_id=account.id)
