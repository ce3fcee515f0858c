"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (token stores, account directory,
notifications, identity provider).
"""

from app.application.interfaces import (
    IAccountDirectory,
    IEmailTemplateRenderer,
    IIdentityProvider,
    INotificationService,
    ITokenStore,
)
from app.application.services import (
    SessionGuard,
    TokenIssuer,
    TokenRedeemer,
    TokenVerifier,
)
from app.application.use_cases import InvitationService, PasswordResetService

__all__ = [
    "IAccountDirectory",
    "IEmailTemplateRenderer",
    "IIdentityProvider",
    "INotificationService",
    "ITokenStore",
    "InvitationService",
    "PasswordResetService",
    "SessionGuard",
    "TokenIssuer",
    "TokenRedeemer",
    "TokenVerifier",
]
