"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, and TokenRecordMixin (the columns every
single-use token table shares).
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class TokenRecordMixin(CuidMixin):
    """Columns shared by token tables: token_hash (unique lookup key), issued_at, expires_at, used_at.

    used_at is NULL until redemption and is only ever set by a conditional
    UPDATE ... WHERE used_at IS NULL.
    """

    @declared_attr
    def token_hash(cls) -> Mapped[str]:
        return mapped_column(String(64), unique=True, nullable=False, index=True)

    @declared_attr
    def issued_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), nullable=False)

    @declared_attr
    def expires_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), nullable=False, index=True)

    @declared_attr
    def used_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True)
