"""Password reset: request a link by email, then redeem it with a new password."""

from __future__ import annotations

from functools import partial

from app.application.dtos.account import AccountResult
from app.application.dtos.flows import PasswordResetRequestResult
from app.application.interfaces.repositories import IAccountDirectory
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
)
from app.application.services.token_issuer import TokenIssuer
from app.application.services.token_redeemer import TokenRedeemer
from app.application.use_cases.credentials.links import build_reset_link, describe_ttl
from app.domain.entities.token import TokenEntity
from app.domain.exceptions import (
    NotificationDeliveryException,
    TokenRedemptionFailedException,
    TransientException,
    ValidationException,
)
from app.domain.value_objects.core import EmailAddress
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

RESET_REQUESTED_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)
RESET_COMPLETED_MESSAGE = (
    "Password has been reset successfully. You can now sign in with your new password."
)


def check_password_strength(password: str, min_length: int, field: str = "password") -> None:
    """Raise ValidationException when password is shorter than min_length."""
    if len(password) < min_length:
        raise ValidationException(
            f"Password must be at least {min_length} characters long", field=field
        )


class PasswordResetService:
    """Issues reset tokens and redeems them against the account directory.

    request_reset answers identically whether or not the email matches an
    account; the only observable difference is the email itself.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        redeemer: TokenRedeemer,
        accounts: IAccountDirectory,
        notifier: INotificationService,
        renderer: IEmailTemplateRenderer,
        *,
        min_password_length: int = 6,
        expose_links: bool = False,
        app_name: str = "Activity Tracker",
    ) -> None:
        self.issuer = issuer
        self.redeemer = redeemer
        self.accounts = accounts
        self.notifier = notifier
        self.renderer = renderer
        self.min_password_length = min_password_length
        self.expose_links = expose_links
        self.app_name = app_name

    async def request_reset(self, email: str, origin: str) -> PasswordResetRequestResult:
        """Issue a reset token when email matches an account; always return the same envelope.

        Raises:
            ValidationException: If email is missing or malformed (safe to surface).
        """
        if not email or not email.strip():
            raise ValidationException("Email is required", field="email")
        try:
            normalized = EmailAddress(email).value
        except ValueError as exc:
            raise ValidationException(str(exc), field="email") from exc

        try:
            account = await self.accounts.get_by_email(normalized)
            if account is None:
                logger.info("Password reset requested for an email with no account")
                return PasswordResetRequestResult(message=RESET_REQUESTED_MESSAGE)
            issued = await self.issuer.issue(account.id, email=account.email)
        except TransientException:
            logger.exception("Password reset issuance failed; answering with generic envelope")
            return PasswordResetRequestResult(message=RESET_REQUESTED_MESSAGE)

        link = build_reset_link(origin, issued.token)
        return PasswordResetRequestResult(
            message=RESET_REQUESTED_MESSAGE,
            reset_link=link if self.expose_links else None,
            deliver=partial(self.deliver_reset_email, account, link),
        )

    async def deliver_reset_email(self, account: AccountResult, reset_link: str) -> bool:
        """Send the reset email. Failure is logged; the issued token stays valid."""
        subject, body = self.renderer.render(
            "password_reset",
            {
                "app_name": self.app_name,
                "user_name": account.name,
                "reset_link": reset_link,
                "ttl_text": describe_ttl(int(self.issuer.default_ttl.total_seconds())),
            },
        )
        try:
            await self.notifier.send([account.email], subject, body)
        except NotificationDeliveryException as exc:
            logger.error(
                "Password reset email not delivered (account=%s): %s",
                account.id,
                exc.details.get("reason"),
            )
            return False
        logger.info("Password reset email sent (account=%s)", account.id)
        return True

    async def reset_password(self, token: str, new_password: str) -> str:
        """Redeem token and replace the credential.

        Raises:
            ValidationException: Missing token/password or password too short.
            TokenRedemptionFailedException: Any token or credential-update failure.
        """
        if not token or not new_password:
            raise ValidationException("Token and new password are required")
        check_password_strength(new_password, self.min_password_length, field="newPassword")

        async def update_credential(record: TokenEntity) -> None:
            await self.accounts.update_password(record.subject_id or "", new_password)

        result = await self.redeemer.redeem(token, update_credential)
        if not result.ok:
            raise TokenRedemptionFailedException()
        return RESET_COMPLETED_MESSAGE
