"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.account_repo import AccountRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.token_store_repo import (
    InvitationRepository,
    PasswordResetTokenRepository,
    SqlTokenStore,
)

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "InvitationRepository",
    "PasswordResetTokenRepository",
    "SqlTokenStore",
]
