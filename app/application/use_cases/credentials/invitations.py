"""Invitations: issue an emailed signup token, verify it, accept it into an account."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.application.dtos.account import AccountCreate, AccountResult
from app.application.dtos.flows import InvitationDetails, InvitationSent
from app.application.interfaces.repositories import IAccountDirectory
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
)
from app.application.services.token_issuer import TokenIssuer
from app.application.services.token_redeemer import TokenRedeemer
from app.application.services.token_verifier import TokenVerifier
from app.application.use_cases.credentials.links import build_signup_link, describe_ttl
from app.application.use_cases.credentials.password_reset import check_password_strength
from app.domain.entities.token import TokenEntity
from app.domain.enums import AccountRole
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    InvitationInvalidException,
    NotificationDeliveryException,
    TokenRedemptionFailedException,
    ValidationException,
)
from app.domain.value_objects.core import EmailAddress
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

INVITATION_SENT_MESSAGE = "Invitation sent successfully"
INVITATION_NOT_EMAILED_MESSAGE = (
    "Invitation created, but the email could not be sent. Please try again later."
)


class InvitationService:
    """Issues, verifies and accepts invitation tokens.

    Sending is an administrative action: an already-registered email is a
    409-style conflict. Verification and acceptance are public and collapse
    every failure into one generic error.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
        redeemer: TokenRedeemer,
        accounts: IAccountDirectory,
        notifier: INotificationService,
        renderer: IEmailTemplateRenderer,
        *,
        min_password_length: int = 6,
        app_name: str = "Activity Tracker",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.issuer = issuer
        self.verifier = verifier
        self.redeemer = redeemer
        self.accounts = accounts
        self.notifier = notifier
        self.renderer = renderer
        self.min_password_length = min_password_length
        self.app_name = app_name
        self._clock = clock

    async def send_invitation(
        self,
        email: str,
        name: str,
        role: str,
        department: str,
        invited_by: str,
        origin: str,
    ) -> InvitationSent:
        """Issue an invitation token and email the signup link.

        A failed email does not undo the issued token; email_sent reports it.

        Raises:
            ValidationException: Missing fields, malformed email, unknown role.
            AccountAlreadyExistsException: The email already has an account.
        """
        fields = {
            "email": email,
            "name": name,
            "role": role,
            "department": department,
            "invitedBy": invited_by,
        }
        missing = [key for key, value in fields.items() if not value or not value.strip()]
        if missing:
            raise ValidationException(
                "Missing required fields: " + ", ".join(missing), field=missing[0]
            )
        if role not in AccountRole.values():
            raise ValidationException(
                f"Invalid role. Must be one of: {', '.join(AccountRole.values())}",
                field="role",
            )
        try:
            normalized = EmailAddress(email).value
        except ValueError as exc:
            raise ValidationException(str(exc), field="email") from exc

        if await self.accounts.get_by_email(normalized) is not None:
            raise AccountAlreadyExistsException(normalized)
        replaced_pending = await self.issuer.store.has_pending_for_email(
            normalized, self._clock()
        )
        if replaced_pending:
            logger.info("Re-issuing invitation while an earlier one is still pending")

        issued = await self.issuer.issue(
            normalized,
            issued_by=invited_by.strip(),
            name=name.strip(),
            role=role,
            department=department.strip(),
        )
        link = build_signup_link(origin, normalized, issued.token)
        email_sent = await self._deliver_invitation(normalized, name.strip(), role, link)
        return InvitationSent(
            invitation_id=issued.record_id,
            email_sent=email_sent,
            message=INVITATION_SENT_MESSAGE if email_sent else INVITATION_NOT_EMAILED_MESSAGE,
            replaced_pending=replaced_pending,
        )

    async def _deliver_invitation(self, email: str, name: str, role: str, link: str) -> bool:
        subject, body = self.renderer.render(
            "invitation",
            {
                "app_name": self.app_name,
                "user_name": name,
                "role": role,
                "signup_link": link,
                "ttl_text": describe_ttl(int(self.issuer.default_ttl.total_seconds())),
            },
        )
        try:
            await self.notifier.send([email], subject, body)
        except NotificationDeliveryException as exc:
            logger.error("Invitation email not delivered: %s", exc.details.get("reason"))
            return False
        return True

    async def verify_invitation(self, token: str, email: str) -> InvitationDetails:
        """Return invitation details for pre-filling signup.

        Raises:
            ValidationException: Missing token or email.
            InvitationInvalidException: Not found, used, expired or bound to another email.
        """
        if not token or not email:
            raise ValidationException("Token and email are required")
        result = await self.verifier.verify(token, email)
        if not result.valid or result.record is None:
            raise InvitationInvalidException()
        return _details(result.record)

    async def accept_invitation(self, token: str, email: str, password: str) -> AccountResult:
        """Redeem the invitation and materialize the account in one unit.

        Raises:
            ValidationException: Missing fields or password too short.
            TokenRedemptionFailedException: Any token or account-creation failure.
        """
        if not token or not email or not password:
            raise ValidationException("Token, email and password are required")
        check_password_strength(password, self.min_password_length)

        created: list[AccountResult] = []

        async def materialize_account(record: TokenEntity) -> None:
            account = await self.accounts.create_account(
                AccountCreate(
                    email=record.email or "",
                    password=password,
                    name=record.name or (record.email or ""),
                    role=record.role or AccountRole.EMPLOYEE.value,
                    department=record.department or "",
                    invited_by=record.issued_by,
                )
            )
            created.append(account)

        result = await self.redeemer.redeem(token, materialize_account, email)
        if not result.ok or not created:
            raise TokenRedemptionFailedException()
        return created[0]


def _details(record: TokenEntity) -> InvitationDetails:
    return InvitationDetails(
        id=record.id,
        email=record.email or "",
        name=record.name,
        role=record.role,
        department=record.department,
        invited_by=record.issued_by,
        expires_at=record.expires_at,
    )
