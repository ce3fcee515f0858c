"""Out-of-band links that carry a raw token to its recipient, and their lifetime text."""

from urllib.parse import urlencode


def build_reset_link(origin: str, token: str) -> str:
    """Return <origin>/reset-password?token=<token>."""
    return f"{origin.rstrip('/')}/reset-password?{urlencode({'token': token})}"


def build_signup_link(origin: str, email: str, token: str) -> str:
    """Return <origin>/auth?mode=signup&email=<email>&token=<token> (email URL-encoded)."""
    query = urlencode({"mode": "signup", "email": email, "token": token})
    return f"{origin.rstrip('/')}/auth?{query}"


def describe_ttl(seconds: int) -> str:
    """Human text for a link lifetime ("1 hour", "7 days", "30 minutes")."""
    for unit, size in (("day", 86400), ("hour", 3600)):
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return f"{count} {unit}" + ("s" if count != 1 else "")
    minutes = max(1, seconds // 60)
    return f"{minutes} minute" + ("s" if minutes != 1 else "")
