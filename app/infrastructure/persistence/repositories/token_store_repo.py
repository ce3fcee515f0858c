"""SQL token stores. One table per purpose, looked up by SHA-256 of the raw token.

claim() is a conditional UPDATE guarded by used_at IS NULL; the row count
tells the caller whether it won. Everything a redemption does runs inside
transaction(), which opens a SAVEPOINT when the session already has a
transaction (the request-scoped one from transactional_session).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.token import TokenEntity
from app.domain.enums import TokenPurpose
from app.domain.value_objects.core import TokenHash
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.email_invitation import EmailInvitation
from app.infrastructure.persistence.models.password_reset_token import (
    PasswordResetToken,
)
from app.infrastructure.persistence.repositories.base import transient_db_errors
from app.shared.utils.datetime import ensure_utc


def _hash(token: str) -> str:
    return TokenHash.of(token).value


ModelType = TypeVar("ModelType", bound=Base)


class SqlTokenStore(Generic[ModelType]):
    """ITokenStore over one token table. Subclasses map rows to TokenEntity and back."""

    purpose: TokenPurpose

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    def _to_entity(self, row: ModelType) -> TokenEntity:
        raise NotImplementedError

    def _to_row(self, record: TokenEntity) -> ModelType:
        raise NotImplementedError

    async def add(self, record: TokenEntity) -> None:
        with transient_db_errors("add"):
            self.db.add(self._to_row(record))
            await self.db.flush()

    async def _get_row(self, token_hash: str) -> ModelType | None:
        # Rows change through bulk UPDATE and SAVEPOINT rollbacks; always reload from the database.
        model: Any = self.model
        stmt = (
            select(self.model)
            .where(model.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, token: str) -> TokenEntity | None:
        if not token:
            return None
        with transient_db_errors("get"):
            row = await self._get_row(_hash(token))
        return self._to_entity(row) if row is not None else None

    async def has_pending_for_email(self, email: str, now: datetime) -> bool:
        model: Any = self.model
        stmt = select(
            exists().where(
                model.email == email,
                model.used_at.is_(None),
                model.expires_at > now,
            )
        )
        with transient_db_errors("has_pending_for_email"):
            result = await self.db.execute(stmt)
        return bool(result.scalar())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """SAVEPOINT inside an active transaction, else a new transaction."""
        with transient_db_errors("transaction"):
            if self.db.in_transaction():
                async with self.db.begin_nested():
                    yield
            else:
                async with self.db.begin():
                    yield

    async def claim(self, token: str, used_at: datetime) -> TokenEntity | None:
        """Set used_at iff still NULL and unexpired. Returns None when another caller won."""
        model: Any = self.model
        token_hash = _hash(token)
        stmt = (
            update(self.model)
            .where(
                model.token_hash == token_hash,
                model.used_at.is_(None),
                model.expires_at > used_at,
            )
            .values(used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        with transient_db_errors("claim"):
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                return None
            row = await self._get_row(token_hash)
        return self._to_entity(row) if row is not None else None


class PasswordResetTokenRepository(SqlTokenStore[PasswordResetToken]):
    """Password reset tokens (table password_reset_token)."""

    purpose = TokenPurpose.PASSWORD_RESET

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, PasswordResetToken)

    def _to_entity(self, row: PasswordResetToken) -> TokenEntity:
        return TokenEntity(
            id=row.id,
            purpose=self.purpose,
            token_hash=row.token_hash,
            issued_at=ensure_utc(row.issued_at),
            expires_at=ensure_utc(row.expires_at),
            used_at=ensure_utc(row.used_at),
            subject_id=row.user_id,
            email=row.email,
        )

    def _to_row(self, record: TokenEntity) -> PasswordResetToken:
        return PasswordResetToken(
            id=record.id,
            token_hash=record.token_hash,
            user_id=record.subject_id,
            email=record.email,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            used_at=record.used_at,
        )


class InvitationRepository(SqlTokenStore[EmailInvitation]):
    """Invitation tokens (table email_invitation)."""

    purpose = TokenPurpose.INVITATION

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, EmailInvitation)

    def _to_entity(self, row: EmailInvitation) -> TokenEntity:
        return TokenEntity(
            id=row.id,
            purpose=self.purpose,
            token_hash=row.token_hash,
            issued_at=ensure_utc(row.issued_at),
            expires_at=ensure_utc(row.expires_at),
            used_at=ensure_utc(row.used_at),
            email=row.email,
            issued_by=row.invited_by,
            name=row.name,
            role=row.role,
            department=row.department,
        )

    def _to_row(self, record: TokenEntity) -> EmailInvitation:
        return EmailInvitation(
            id=record.id,
            token_hash=record.token_hash,
            email=record.email,
            invited_by=record.issued_by,
            name=record.name,
            role=record.role,
            department=record.department,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            used_at=record.used_at,
        )
