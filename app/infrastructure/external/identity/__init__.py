"""Identity provider adapters and session guard wiring."""

from app.infrastructure.external.identity.factory import (
    create_identity_provider,
    create_session_guard,
)
from app.infrastructure.external.identity.gotrue_provider import GoTrueIdentityProvider

__all__ = [
    "GoTrueIdentityProvider",
    "create_identity_provider",
    "create_session_guard",
]
