"""Domain enumerations for the credential lifecycle.

Enums represent fixed sets of domain values (token purpose, invalidity
reasons, session guard states, account roles).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TokenPurpose(_ValuesMixin, str, Enum):
    """What a single-use token grants.

    Each purpose has its own default TTL and its own persisted record type.
    """

    PASSWORD_RESET = "password_reset"
    INVITATION = "invitation"


class InvalidReason(_ValuesMixin, str, Enum):
    """Why a token could not be verified or redeemed.

    The first four are verification outcomes, checked in declaration order.
    The rest only arise during redemption. None of them is ever shown to an
    external caller; they exist for server-side logs.
    """

    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    EXPIRED = "expired"
    IDENTITY_MISMATCH = "identity_mismatch"
    CONFLICT = "conflict"
    EFFECT_FAILED = "effect_failed"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"


class SessionState(_ValuesMixin, str, Enum):
    """Client session state as tracked by the session guard."""

    FRESH = "fresh"
    NEAR_EXPIRY = "near_expiry"
    EXPIRED = "expired"
    INVALIDATED = "invalidated"


class AccountRole(_ValuesMixin, str, Enum):
    """Role assigned to an account (pre-filled from an invitation)."""

    EMPLOYEE = "employee"
    CEO = "ceo"
    DEVELOPER = "developer"


class AccountStatus(_ValuesMixin, str, Enum):
    """Account lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
