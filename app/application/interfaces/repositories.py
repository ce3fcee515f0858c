"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from app.application.dtos.account import AccountCreate, AccountResult
    from app.domain.entities.token import TokenEntity


# Token store interface
class ITokenStore(Protocol):
    """Protocol for the durable token store of one purpose (DIP).

    Records are keyed by the hash of the raw token. claim is the only
    mutation after add and must behave as a compare-and-set on used_at.
    """

    async def add(self, record: TokenEntity) -> None:
        """Persist a new record (used_at is None)."""

    async def get(self, token: str) -> TokenEntity | None:
        """Return the record for a raw token, or None. Never mutates."""

    async def has_pending_for_email(self, email: str, now: datetime) -> bool:
        """Return True if an unused, unexpired record exists for email."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Unit of work: every mutation inside is rolled back if the block raises."""

    async def claim(self, token: str, used_at: datetime) -> TokenEntity | None:
        """Set used_at iff it is NULL and the token is unexpired at used_at.

        Returns the claimed record, or None when another caller already
        claimed it (or it expired). Must be called inside transaction().
        """


# Account directory interface
class IAccountDirectory(Protocol):
    """Protocol for the account/identity directory consumed by token effects (DIP)."""

    async def get_by_email(self, email: str) -> AccountResult | None:
        """Return account with this email (normalized), or None."""

    async def get_by_id(self, account_id: str) -> AccountResult | None:
        """Return account by id, or None."""

    async def update_password(self, account_id: str, new_password: str) -> None:
        """Replace the account credential. Raises AccountNotFoundException when gone."""

    async def create_account(self, data: AccountCreate) -> AccountResult:
        """Materialize an account. Raises AccountAlreadyExistsException on duplicate email."""

    def subscribe(self, listener: Callable[[str, AccountResult], None]) -> Callable[[], None]:
        """Register listener(event, account) for account changes; returns an unsubscribe callable."""
