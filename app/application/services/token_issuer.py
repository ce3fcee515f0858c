"""Token issuance: create and persist a single-use token for one purpose."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from app.application.dtos.token import IssuedToken
from app.application.interfaces.repositories import ITokenStore
from app.domain.entities.token import TokenEntity
from app.domain.enums import TokenPurpose
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import EmailAddress, TokenHash
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid, generate_token

logger = get_logger(__name__)


class TokenIssuer:
    """Creates tokens for the purpose its store holds.

    The raw token is returned once and never persisted; the caller embeds it
    in an out-of-band link. Notification is not this class's concern, so a
    failed dispatch can never corrupt or invalidate an issued record.
    """

    def __init__(
        self,
        store: ITokenStore,
        purpose: TokenPurpose,
        default_ttl: timedelta,
        *,
        clock: Callable[[], datetime] = utc_now,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self.store = store
        self.purpose = purpose
        self.default_ttl = default_ttl
        self._clock = clock
        self._token_factory = token_factory

    async def issue(
        self,
        subject_or_email: str,
        ttl: timedelta | None = None,
        *,
        email: str | None = None,
        issued_by: str | None = None,
        name: str | None = None,
        role: str | None = None,
        department: str | None = None,
    ) -> IssuedToken:
        """Issue and persist a token.

        Args:
            subject_or_email: Account id for password_reset; invitee email for invitation.
            ttl: Lifetime; defaults to the purpose's configured TTL.
            email: Account email snapshot (password_reset only).
            issued_by: Inviter identity (invitation only).
            name: Invitee display name (invitation only).
            role: Invitee role (invitation only).
            department: Invitee department (invitation only).

        Returns:
            IssuedToken with the raw token and its absolute expiry.

        Raises:
            ValidationException: If subject_or_email is empty, the email is
                malformed or ttl is not positive.
        """
        if not subject_or_email or not subject_or_email.strip():
            field = "email" if self.purpose == TokenPurpose.INVITATION else "subject_id"
            raise ValidationException("Subject or email is required", field=field)
        lifetime = ttl if ttl is not None else self.default_ttl
        if lifetime <= timedelta(0):
            raise ValidationException("Token TTL must be positive", field="ttl")

        if self.purpose == TokenPurpose.INVITATION:
            subject_id = None
            email = self._normalize_email(subject_or_email)
        else:
            subject_id = subject_or_email.strip()
            email = self._normalize_email(email) if email else None

        raw = self._token_factory()
        issued_at = self._clock()
        record = TokenEntity(
            id=generate_cuid(),
            purpose=self.purpose,
            token_hash=TokenHash.of(raw).value,
            issued_at=issued_at,
            expires_at=issued_at + lifetime,
            subject_id=subject_id,
            email=email,
            issued_by=issued_by,
            name=name,
            role=role,
            department=department,
        )
        await self.store.add(record)
        logger.info(
            "Issued %s token id=%s expires_at=%s",
            self.purpose.value,
            record.id,
            record.expires_at.isoformat(),
        )
        return IssuedToken(token=raw, expires_at=record.expires_at, record_id=record.id)

    @staticmethod
    def _normalize_email(value: str) -> str:
        try:
            return EmailAddress(value).value
        except ValueError as exc:
            raise ValidationException(str(exc), field="email") from exc
