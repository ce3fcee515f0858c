"""Shared utilities: datetime helpers and generators."""

from app.shared.utils.datetime import ensure_utc, from_timestamp_utc, utc_now
from app.shared.utils.generators import generate_cuid, generate_token, token_prefix

__all__ = [
    "ensure_utc",
    "from_timestamp_utc",
    "generate_cuid",
    "generate_token",
    "token_prefix",
    "utc_now",
]
