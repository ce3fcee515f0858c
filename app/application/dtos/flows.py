"""DTOs for the password-reset and invitation flows."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PasswordResetRequestResult:
    """Identical envelope whether or not the email matched an account.

    reset_link is only populated in development. deliver sends the email;
    the caller runs it after responding so that response timing does not
    depend on whether an account exists. None when there is nothing to send.
    """

    message: str
    reset_link: str | None = None
    deliver: Callable[[], Awaitable[bool]] | None = field(
        default=None, repr=False, compare=False
    )


@dataclass(frozen=True)
class InvitationSent:
    """Result of issuing an invitation."""

    invitation_id: str
    email_sent: bool
    message: str
    # An earlier unused, unexpired invitation for the same email exists (it stays redeemable).
    replaced_pending: bool = False


@dataclass(frozen=True)
class InvitationDetails:
    """Public view of a valid invitation (used to pre-fill signup)."""

    id: str
    email: str
    name: str | None
    role: str | None
    department: str | None
    invited_by: str | None
    expires_at: datetime
