"""Single-use token domain entity.

Represents an issued password-reset or invitation token, independent of
persistence. The raw token value is not part of the entity; stores look
records up by the hash of the presented value.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from app.domain.enums import InvalidReason, TokenPurpose
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import EmailAddress


@dataclass(frozen=True)
class TokenEntity:
    """Domain entity for a single-use token.

    used_at moves from None to a timestamp exactly once. A token is
    redeemable iff used_at is None, now < expires_at and (checked by the
    caller for password_reset) its subject still exists.
    """

    id: str
    purpose: TokenPurpose
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    used_at: datetime | None = None
    subject_id: str | None = None
    email: str | None = None
    issued_by: str | None = None
    name: str | None = None
    role: str | None = None
    department: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate token business rules. Raises ValidationException if invalid."""
        if not self.token_hash:
            raise ValidationException("Token hash is required", field="token_hash")
        if self.expires_at <= self.issued_at:
            raise ValidationException("Token must expire after it is issued", field="expires_at")
        if self.purpose == TokenPurpose.PASSWORD_RESET and not self.subject_id:
            raise ValidationException("Password reset token requires a subject", field="subject_id")
        if self.purpose == TokenPurpose.INVITATION and not self.email:
            raise ValidationException("Invitation token requires an email", field="email")

    @property
    def identity(self) -> str | None:
        """Identity the token is bound to: subject id (reset) or email (invitation)."""
        if self.purpose == TokenPurpose.INVITATION:
            return self.email
        return self.subject_id

    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def matches_identity(self, expected: str | None) -> bool:
        """Return whether expected matches this token's identity.

        None means the caller has no identity to compare (e.g. a reset link
        carries only the token). Invitation emails are compared normalized.
        """
        if expected is None:
            return True
        if self.purpose == TokenPurpose.INVITATION:
            try:
                return EmailAddress(expected).value == self.email
            except ValueError:
                return False
        return expected == self.subject_id

    def check(self, now: datetime, expected_identity: str | None = None) -> InvalidReason | None:
        """Return the first failing check (used, expired, identity) or None when valid.

        Existence is checked by the caller before an entity exists.
        """
        if self.is_used():
            return InvalidReason.ALREADY_USED
        if self.is_expired(now):
            return InvalidReason.EXPIRED
        if not self.matches_identity(expected_identity):
            return InvalidReason.IDENTITY_MISMATCH
        return None

    def mark_used(self, used_at: datetime) -> "TokenEntity":
        """Return a copy with used_at set. Raises ValueError if already used."""
        if self.is_used():
            raise ValueError("Token already used")
        return replace(self, used_at=used_at)
