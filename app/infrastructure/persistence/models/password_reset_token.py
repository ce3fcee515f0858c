"""Password reset token. One row per issued reset link; never deleted on expiry."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TokenRecordMixin


class PasswordResetToken(TokenRecordMixin, Base):
    """Reset token bound to an account. Stored by token_hash; used_at marks redemption."""

    __tablename__ = "password_reset_token"

    user_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str | None] = mapped_column(String, nullable=True)
