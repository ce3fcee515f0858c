"""DTOs for the client-held session."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SessionSnapshot:
    """Session as reported by the identity provider. expires_at is absolute (UTC)."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: str | None = None
