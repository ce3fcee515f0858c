"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.token import TokenEntity

__all__ = [
    "TokenEntity",
]
