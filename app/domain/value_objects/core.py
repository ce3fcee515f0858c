"""Domain value objects for the credential lifecycle.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import hashlib
import re
from dataclasses import dataclass

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class EmailAddress:
    """Value object for an email address used as token identity.

    Normalized to stripped lower-case so that comparisons between an issued
    invitation and the email presented on verification are stable.
    """

    value: str

    def __post_init__(self) -> None:
        """Normalize and validate.

        Raises:
            ValueError: If empty or not shaped like an email address.
        """
        normalized = (self.value or "").strip().lower()
        object.__setattr__(self, "value", normalized)
        if not normalized:
            raise ValueError("Email must be a non-empty string")
        if not _EMAIL_RE.match(normalized):
            raise ValueError("Email must be a valid email address")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TokenHash:
    """Value object for the stored form of a token (SHA-256 hex of the raw value).

    Raw tokens are never persisted; lookups hash the presented value first.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate length and hex characters.

        Raises:
            ValueError: If empty, wrong length, or non-hex.
        """
        object.__setattr__(self, "value", self.value.lower())
        if len(self.value) != 64:
            raise ValueError("Token hash must be a SHA-256 (64 chars) hex string")
        if not all(c in "0123456789abcdef" for c in self.value):
            raise ValueError("Token hash must contain only hexadecimal characters")

    @classmethod
    def of(cls, raw_token: str) -> "TokenHash":
        """Hash a raw token value."""
        return cls(hashlib.sha256(raw_token.encode("utf-8")).hexdigest())
