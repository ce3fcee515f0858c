"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import IAccountDirectory, ITokenStore
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    IIdentityProvider,
    INotificationService,
)

__all__ = [
    "IAccountDirectory",
    "IEmailTemplateRenderer",
    "IIdentityProvider",
    "INotificationService",
    "ITokenStore",
]
