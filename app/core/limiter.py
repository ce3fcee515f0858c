"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules (e.g. auth) can use
the same instance without circular imports. Central limit strings and decorators
keep rate limits DRY.
"""

import time
from collections import defaultdict
from threading import Lock

from fastapi import HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
AUTH_LIMIT = "10/minute"
INVITE_LIMIT = "30/minute"
RESET_PER_EMAIL_LIMIT = 5  # reset emails per address per window
RESET_PER_EMAIL_WINDOW_SEC = 15 * 60

limit_auth = limiter.limit(AUTH_LIMIT)
limit_invites = limiter.limit(INVITE_LIMIT)

# In-memory sliding window for per-email reset requests. Applied whether or not
# the address has an account, so a 429 reveals nothing about existence.
_reset_per_email: defaultdict[str, list[float]] = defaultdict(list)
_reset_per_email_lock = Lock()


def check_reset_rate_per_email(email: str) -> None:
    """Raise 429 if too many reset requests for this email in the window."""
    if not email or not limiter.enabled:
        return
    now = time.monotonic()
    cutoff = now - RESET_PER_EMAIL_WINDOW_SEC
    key = email.strip().lower()
    with _reset_per_email_lock:
        _reset_per_email[key] = [t for t in _reset_per_email[key] if t > cutoff]
        if len(_reset_per_email[key]) >= RESET_PER_EMAIL_LIMIT:
            raise HTTPException(
                status_code=429,
                detail="Too many reset requests for this address; try again later",
            )
        _reset_per_email[key].append(now)


def reset_rate_limits() -> None:
    """Forget all per-email windows (tests, admin tooling)."""
    with _reset_per_email_lock:
        _reset_per_email.clear()
