"""Application services: token issuance, verification, redemption and the session guard."""

from app.application.services.session_guard import SESSION_EXPIRED_NOTICE, SessionGuard
from app.application.services.token_issuer import TokenIssuer
from app.application.services.token_redeemer import TokenRedeemer
from app.application.services.token_verifier import TokenVerifier

__all__ = [
    "SESSION_EXPIRED_NOTICE",
    "SessionGuard",
    "TokenIssuer",
    "TokenRedeemer",
    "TokenVerifier",
]
