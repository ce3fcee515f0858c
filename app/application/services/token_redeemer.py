"""Atomic token redemption: claim and effect commit together or not at all.

Flow:
  1. verify (read-only) for a precise reason on the common failure paths;
  2. inside store.transaction(): claim (compare-and-set on used_at), then
     run the effect;
  3. any exception in step 2 rolls the claim back, so the token stays usable.

The whole unit is bounded by timeout_seconds. Cancellation on timeout
unwinds the transaction like any other exception.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime

from app.application.dtos.token import RedemptionResult
from app.application.interfaces.repositories import ITokenStore
from app.application.services.token_verifier import TokenVerifier
from app.domain.entities.token import TokenEntity
from app.domain.enums import InvalidReason
from app.domain.exceptions import (
    DownstreamException,
    RedemptionConflictException,
    TokenInvalidException,
    TrackerException,
    TransientException,
    token_exception_for,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import token_prefix

logger = get_logger(__name__)

Effect = Callable[[TokenEntity], Awaitable[None]]

DEFAULT_REDEMPTION_TIMEOUT_SECONDS = 10.0


class TokenRedeemer:
    """Consumes a token exactly once and applies its effect.

    Returns RedemptionResult instead of raising so that callers cannot
    accidentally leak the reason; the reason is logged here.
    """

    def __init__(
        self,
        store: ITokenStore,
        verifier: TokenVerifier,
        *,
        timeout_seconds: float = DEFAULT_REDEMPTION_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.verifier = verifier
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    async def redeem(
        self,
        token: str,
        effect: Effect,
        expected_subject_or_email: str | None = None,
    ) -> RedemptionResult:
        """Verify, claim and apply effect atomically. Never raises for token or effect failures."""
        try:
            record = await asyncio.wait_for(
                self._redeem(token, effect, expected_subject_or_email),
                timeout=self.timeout_seconds,
            )
        except TokenInvalidException as exc:
            return self._fail(token, exc.reason)
        except asyncio.TimeoutError:
            return self._fail(token, InvalidReason.TIMEOUT)
        except TransientException:
            return self._fail(token, InvalidReason.TRANSIENT)
        except TrackerException as exc:
            logger.warning(
                "Token effect failed: token=%s error_code=%s details=%s",
                token_prefix(token),
                exc.error_code,
                exc.details,
            )
            return self._fail(token, InvalidReason.EFFECT_FAILED)
        logger.info(
            "Token redeemed: token=%s purpose=%s id=%s",
            token_prefix(token),
            record.purpose.value,
            record.id,
        )
        return RedemptionResult.success(record)

    async def _redeem(
        self,
        token: str,
        effect: Effect,
        expected_subject_or_email: str | None,
    ) -> TokenEntity:
        verification = await self.verifier.verify(token, expected_subject_or_email)
        if not verification.valid:
            raise token_exception_for(verification.reason or InvalidReason.NOT_FOUND)

        async with self.store.transaction():
            claimed = await self.store.claim(token, self._clock())
            if claimed is None:
                raise RedemptionConflictException()
            try:
                await effect(claimed)
            except TrackerException:
                raise
            except Exception as exc:
                logger.exception("Token effect raised: token=%s", token_prefix(token))
                raise DownstreamException(claimed.purpose.value, str(exc)) from exc
        return claimed

    @staticmethod
    def _fail(token: str, reason: InvalidReason) -> RedemptionResult:
        logger.info(
            "Token redemption failed: token=%s reason=%s",
            token_prefix(token),
            reason.value,
        )
        return RedemptionResult.failure(reason)
