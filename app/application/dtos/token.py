"""DTOs for token issuance, verification and redemption (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.token import TokenEntity
from app.domain.enums import InvalidReason


@dataclass(frozen=True)
class IssuedToken:
    """Result of TokenIssuer.issue. The raw token is only ever available here."""

    token: str
    expires_at: datetime
    record_id: str


@dataclass(frozen=True)
class VerificationResult:
    """Valid (reason None, record set) or Invalid(reason). reason is for server logs only."""

    valid: bool
    reason: InvalidReason | None = None
    record: TokenEntity | None = None

    @classmethod
    def ok(cls, record: TokenEntity) -> "VerificationResult":
        return cls(valid=True, record=record)

    @classmethod
    def invalid(
        cls, reason: InvalidReason, record: TokenEntity | None = None
    ) -> "VerificationResult":
        return cls(valid=False, reason=reason, record=record)


@dataclass(frozen=True)
class RedemptionResult:
    """Ok or Invalid(reason) from TokenRedeemer.redeem. reason is for server logs only."""

    ok: bool
    reason: InvalidReason | None = None
    record: TokenEntity | None = None

    @classmethod
    def success(cls, record: TokenEntity) -> "RedemptionResult":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, reason: InvalidReason) -> "RedemptionResult":
        return cls(ok=False, reason=reason)
