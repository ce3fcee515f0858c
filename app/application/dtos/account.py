"""DTOs for account lookups and creation (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccountResult:
    """Account read-model. No credential material."""

    id: str
    email: str
    name: str
    role: str
    department: str
    status: str


@dataclass(frozen=True)
class AccountCreate:
    """Data for materializing an account from an accepted invitation."""

    email: str
    password: str
    name: str
    role: str
    department: str
    invited_by: str | None = None
