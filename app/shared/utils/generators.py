"""ID and value generators (CUID record ids, opaque tokens)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# 32 bytes = 256 bits of entropy, URL-safe base64 (43 chars).
TOKEN_BYTES = 32


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_token() -> str:
    """Generate an opaque, unguessable single-use token from the OS CSPRNG.

    Returns:
        URL-safe token string.
    """
    return secrets.token_urlsafe(TOKEN_BYTES)


def token_prefix(token: str | None, length: int = 8) -> str:
    """Return a log-safe prefix of a token (never log the full value)."""
    if not token:
        return "<empty>"
    return f"{token[:length]}..."
