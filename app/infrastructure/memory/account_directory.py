"""Process-local account directory (memory backend, tests)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from app.application.dtos.account import AccountCreate, AccountResult
from app.application.services.account_events import (
    ACCOUNT_CREATED,
    ACCOUNT_PASSWORD_CHANGED,
    AccountEventChannel,
    AccountListener,
)
from app.domain.enums import AccountRole, AccountStatus
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    AccountNotFoundException,
)
from app.domain.value_objects.core import EmailAddress
from app.infrastructure.security.password import (
    hash_password_async,
    verify_password_async,
)
from app.shared.utils.generators import generate_cuid


@dataclass
class _StoredAccount:
    account: AccountResult
    hashed_password: str


class InMemoryAccountDirectory:
    """IAccountDirectory kept in a dict. Passwords are bcrypt-hashed like the SQL adapter."""

    def __init__(self, events: AccountEventChannel | None = None) -> None:
        self.events = events or AccountEventChannel()
        self._by_id: dict[str, _StoredAccount] = {}

    def _find_by_email(self, email: str) -> _StoredAccount | None:
        return next((s for s in self._by_id.values() if s.account.email == email), None)

    async def get_by_email(self, email: str) -> AccountResult | None:
        try:
            normalized = EmailAddress(email).value
        except ValueError:
            return None
        stored = self._find_by_email(normalized)
        return stored.account if stored else None

    async def get_by_id(self, account_id: str) -> AccountResult | None:
        stored = self._by_id.get(account_id)
        return stored.account if stored else None

    async def update_password(self, account_id: str, new_password: str) -> None:
        stored = self._by_id.get(account_id)
        if stored is None:
            raise AccountNotFoundException(account_id)
        stored.hashed_password = await hash_password_async(new_password)
        self.events.publish(ACCOUNT_PASSWORD_CHANGED, stored.account)

    async def create_account(self, data: AccountCreate) -> AccountResult:
        email = EmailAddress(data.email).value
        if self._find_by_email(email) is not None:
            raise AccountAlreadyExistsException(email)
        hashed = await hash_password_async(data.password)
        # Re-check after the hashing await; another task may have created it.
        if self._find_by_email(email) is not None:
            raise AccountAlreadyExistsException(email)
        account = AccountResult(
            id=generate_cuid(),
            email=email,
            name=data.name,
            role=data.role,
            department=data.department,
            status=AccountStatus.ACTIVE.value,
        )
        self._by_id[account.id] = _StoredAccount(account=account, hashed_password=hashed)
        self.events.publish(ACCOUNT_CREATED, account)
        return account

    async def delete_account(self, account_id: str) -> None:
        self._by_id.pop(account_id, None)

    async def check_password(self, email: str, password: str) -> bool:
        stored = self._find_by_email(EmailAddress(email).value)
        if stored is None:
            return False
        return await verify_password_async(password, stored.hashed_password)

    async def seed(
        self,
        email: str,
        password: str,
        name: str,
        role: str = AccountRole.EMPLOYEE.value,
        department: str = "",
    ) -> AccountResult:
        """Create an account directly (not via an invitation)."""
        return await self.create_account(
            AccountCreate(email=email, password=password, name=name, role=role, department=department)
        )

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        return self.events.subscribe(listener)
