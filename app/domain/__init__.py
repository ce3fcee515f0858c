"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import TokenEntity
from app.domain.enums import (
    AccountRole,
    AccountStatus,
    InvalidReason,
    SessionState,
    TokenPurpose,
)
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    DownstreamException,
    TokenInvalidException,
    TokenRedemptionFailedException,
    TrackerException,
    TransientException,
    ValidationException,
)
from app.domain.value_objects import EmailAddress, TokenHash

__all__ = [
    # Entities
    "TokenEntity",
    # Enums
    "AccountRole",
    "AccountStatus",
    "InvalidReason",
    "SessionState",
    "TokenPurpose",
    # Exceptions
    "AccountAlreadyExistsException",
    "DownstreamException",
    "TokenInvalidException",
    "TokenRedemptionFailedException",
    "TrackerException",
    "TransientException",
    "ValidationException",
    # Value objects
    "EmailAddress",
    "TokenHash",
]
