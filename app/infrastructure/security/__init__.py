"""Security: account credential hashing."""

from app.infrastructure.security.password import (
    get_password_hash,
    hash_password_async,
    verify_password,
    verify_password_async,
)

__all__ = [
    "get_password_hash",
    "hash_password_async",
    "verify_password",
    "verify_password_async",
]
