"""Domain value objects and shared value types."""

from app.domain.value_objects.core import EmailAddress, TokenHash

__all__ = [
    "EmailAddress",
    "TokenHash",
]
