"""Read-only token verification with a fixed check order."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

from app.application.dtos.token import VerificationResult
from app.application.interfaces.repositories import ITokenStore
from app.domain.entities.token import TokenEntity
from app.domain.enums import InvalidReason, TokenPurpose
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import token_prefix

logger = get_logger(__name__)

SubjectExists = Callable[[str], Awaitable[bool]]


class TokenVerifier:
    """Checks a token without mutating it.

    Order: existence, used, expiry, identity. The first failing check is the
    reported reason. For password_reset tokens the identity check also
    requires the subject account to still exist (subject_exists).

    The reason is logged here and returned to internal callers; API layers
    must collapse every invalid result into one undifferentiated response.
    """

    def __init__(
        self,
        store: ITokenStore,
        *,
        subject_exists: SubjectExists | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self._subject_exists = subject_exists
        self._clock = clock

    async def verify(
        self, token: str, expected_subject_or_email: str | None = None
    ) -> VerificationResult:
        """Return Valid(record) or Invalid(reason)."""
        if not token:
            return self._reject(token, InvalidReason.NOT_FOUND)
        record = await self.store.get(token)
        if record is None:
            return self._reject(token, InvalidReason.NOT_FOUND)

        reason = record.check(self._clock(), expected_subject_or_email)
        if (
            reason is None
            and record.purpose == TokenPurpose.PASSWORD_RESET
            and self._subject_exists is not None
            and not await self._subject_exists(record.subject_id or "")
        ):
            reason = InvalidReason.IDENTITY_MISMATCH
        if reason is not None:
            return self._reject(token, reason, record)
        return VerificationResult.ok(record)

    @staticmethod
    def _reject(
        token: str, reason: InvalidReason, record: TokenEntity | None = None
    ) -> VerificationResult:
        logger.info(
            "Token verification failed: token=%s purpose=%s reason=%s",
            token_prefix(token),
            record.purpose.value if record is not None else "unknown",
            reason.value,
        )
        return VerificationResult.invalid(reason, record)
