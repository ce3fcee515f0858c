"""Account directory over the profiles table. Interface methods return application DTOs."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.account import AccountCreate, AccountResult
from app.application.services.account_events import (
    ACCOUNT_CREATED,
    ACCOUNT_PASSWORD_CHANGED,
    AccountEventChannel,
    AccountListener,
)
from app.domain.enums import AccountStatus
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    AccountNotFoundException,
)
from app.domain.value_objects.core import EmailAddress
from app.infrastructure.persistence.models.profile import Profile
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    transient_db_errors,
)
from app.infrastructure.security.password import hash_password_async


def _profile_to_result(p: Profile) -> AccountResult:
    """Map ORM Profile to application AccountResult (no credential)."""
    return AccountResult(
        id=p.id,
        email=p.email,
        name=p.name,
        role=p.role,
        department=p.department,
        status=p.status,
    )


class AccountRepository(BaseRepository[Profile]):
    """IAccountDirectory on SQL. Changes are published on the shared event channel.

    Driver and pool failures surface as TransientException, like the token stores.
    """

    def __init__(self, db: AsyncSession, events: AccountEventChannel | None = None) -> None:
        super().__init__(db, Profile)
        self.events = events or AccountEventChannel()

    async def _get_orm_by_email(self, email: str) -> Profile | None:
        with transient_db_errors("account lookup"):
            result = await self.db.execute(select(Profile).where(Profile.email == email))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> AccountResult | None:
        try:
            normalized = EmailAddress(email).value
        except ValueError:
            return None
        profile = await self._get_orm_by_email(normalized)
        return _profile_to_result(profile) if profile else None

    async def get_by_id(self, account_id: str) -> AccountResult | None:
        with transient_db_errors("account lookup"):
            profile = await self._get_orm_by_id(account_id)
        return _profile_to_result(profile) if profile else None

    async def update_password(self, account_id: str, new_password: str) -> None:
        with transient_db_errors("password update"):
            profile = await self._get_orm_by_id(account_id)
            if profile is None:
                raise AccountNotFoundException(account_id)
            profile.hashed_password = await hash_password_async(new_password)
            await self.update(profile)
        self.events.publish(ACCOUNT_PASSWORD_CHANGED, _profile_to_result(profile))

    async def create_account(self, data: AccountCreate) -> AccountResult:
        """Create account; raise AccountAlreadyExistsException on duplicate email."""
        email = EmailAddress(data.email).value
        if await self._get_orm_by_email(email) is not None:
            raise AccountAlreadyExistsException(email)
        profile = Profile(
            email=email,
            name=data.name,
            role=data.role,
            department=data.department,
            status=AccountStatus.ACTIVE.value,
            hashed_password=await hash_password_async(data.password),
            invited_by=data.invited_by,
        )
        try:
            with transient_db_errors("account create"):
                created = await self.create(profile)
        except IntegrityError as exc:
            raise AccountAlreadyExistsException(email) from exc
        return _profile_to_result(created)

    async def _on_after_create(self, obj: Profile) -> None:
        self.events.publish(ACCOUNT_CREATED, _profile_to_result(obj))

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        return self.events.subscribe(listener)
