"""Email invitation. Carries the signup pre-fill fields chosen by the inviter."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TokenRecordMixin


class EmailInvitation(TokenRecordMixin, Base):
    """Invitation token bound to an email (stored lower-case). Several may be pending per email."""

    __tablename__ = "email_invitation"

    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    invited_by: Mapped[str | None] = mapped_column(String, nullable=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    department: Mapped[str | None] = mapped_column(String, nullable=True)
