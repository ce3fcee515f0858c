"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the credential backend and application use
cases. All use cases are built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.

When database_backend is 'postgres', stores and the account directory use
SQLAlchemy, all sharing one request-scoped transaction.
When database_backend is 'memory', they live on app.state for the process lifetime.
Switch backends via DATABASE_BACKEND in config.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from app.application.interfaces.repositories import IAccountDirectory, ITokenStore
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
)
from app.application.services.account_events import (
    AccountEventChannel,
    log_account_event,
)
from app.application.services.token_issuer import TokenIssuer
from app.application.services.token_redeemer import TokenRedeemer
from app.application.services.token_verifier import TokenVerifier
from app.application.use_cases.credentials import (
    InvitationService,
    PasswordResetService,
)
from app.core.config import Settings, get_settings
from app.domain.enums import TokenPurpose
from app.infrastructure.memory import MemoryBackend
from app.infrastructure.persistence.database import transactional_session
from app.infrastructure.persistence.repositories import (
    AccountRepository,
    InvitationRepository,
    PasswordResetTokenRepository,
)
from app.infrastructure.services import (
    EmailTemplateRenderer,
    LogOnlyNotificationService,
    ResendNotificationService,
)


@dataclass(frozen=True)
class CredentialBackend:
    """Stores and account directory for one request (same transaction on SQL)."""

    reset_tokens: ITokenStore
    invitations: ITokenStore
    accounts: IAccountDirectory


def _get_account_events(request: Request) -> AccountEventChannel:
    """One event channel per app; account changes are logged by default."""
    events = getattr(request.app.state, "account_events", None)
    if events is None:
        events = AccountEventChannel()
        events.subscribe(log_account_event)
        request.app.state.account_events = events
    return events


def get_memory_backend(request: Request) -> MemoryBackend:
    """Process-local backend, created on first use and kept on app.state."""
    backend = getattr(request.app.state, "memory_backend", None)
    if backend is None:
        backend = MemoryBackend(events=_get_account_events(request))
        request.app.state.memory_backend = backend
    return backend


async def get_credential_backend(request: Request) -> AsyncIterator[CredentialBackend]:
    """Yield the credential backend; on postgres commit on success, roll back on exception."""
    settings = get_settings()
    if settings.database_backend == "memory":
        memory = get_memory_backend(request)
        yield CredentialBackend(memory.reset_tokens, memory.invitations, memory.accounts)
        return
    async with transactional_session() as db:
        yield CredentialBackend(
            reset_tokens=PasswordResetTokenRepository(db),
            invitations=InvitationRepository(db),
            accounts=AccountRepository(db, _get_account_events(request)),
        )


def get_notification_service(request: Request) -> INotificationService:
    """Email sender for EMAIL_BACKEND (log or resend)."""
    settings = get_settings()
    if settings.email_backend == "resend" and settings.resend_api_key is not None:
        return ResendNotificationService(
            settings.resend_api_key.get_secret_value(),
            settings.verified_sender_email,
            sender_name=settings.email_app_name,
            api_url=settings.resend_api_url,
            timeout=settings.email_timeout_seconds,
            http_client=getattr(request.app.state, "http_client", None),
        )
    return LogOnlyNotificationService()


@lru_cache
def get_email_renderer() -> IEmailTemplateRenderer:
    return EmailTemplateRenderer()


def get_link_origin(request: Request) -> str:
    """Origin for emailed links: the request Origin when it is an allowed origin, else PUBLIC_APP_URL."""
    settings = get_settings()
    allowed = {o.strip().rstrip("/") for o in settings.allowed_origins.split(",") if o.strip()}
    origin = (request.headers.get("origin") or "").rstrip("/")
    if origin and origin in allowed:
        return origin
    return settings.public_app_url.rstrip("/")


def _account_exists(accounts: IAccountDirectory) -> Callable[[str], Awaitable[bool]]:
    async def exists(account_id: str) -> bool:
        return await accounts.get_by_id(account_id) is not None

    return exists


def _build_token_services(
    store: ITokenStore,
    purpose: TokenPurpose,
    ttl_seconds: int,
    settings: Settings,
    accounts: IAccountDirectory,
) -> tuple[TokenIssuer, TokenVerifier, TokenRedeemer]:
    issuer = TokenIssuer(store, purpose, timedelta(seconds=ttl_seconds))
    verifier = TokenVerifier(
        store,
        subject_exists=_account_exists(accounts)
        if purpose == TokenPurpose.PASSWORD_RESET
        else None,
    )
    redeemer = TokenRedeemer(
        store, verifier, timeout_seconds=settings.redemption_timeout_seconds
    )
    return issuer, verifier, redeemer


def get_password_reset_service(
    backend: Annotated[CredentialBackend, Depends(get_credential_backend)],
    notifier: Annotated[INotificationService, Depends(get_notification_service)],
    renderer: Annotated[IEmailTemplateRenderer, Depends(get_email_renderer)],
) -> PasswordResetService:
    """Build PasswordResetService for this request."""
    settings = get_settings()
    issuer, _, redeemer = _build_token_services(
        backend.reset_tokens,
        TokenPurpose.PASSWORD_RESET,
        settings.password_reset_ttl_seconds,
        settings,
        backend.accounts,
    )
    return PasswordResetService(
        issuer,
        redeemer,
        backend.accounts,
        notifier,
        renderer,
        min_password_length=settings.min_password_length,
        expose_links=settings.is_development,
        app_name=settings.email_app_name,
    )


def get_invitation_service(
    backend: Annotated[CredentialBackend, Depends(get_credential_backend)],
    notifier: Annotated[INotificationService, Depends(get_notification_service)],
    renderer: Annotated[IEmailTemplateRenderer, Depends(get_email_renderer)],
) -> InvitationService:
    """Build InvitationService for this request."""
    settings = get_settings()
    issuer, verifier, redeemer = _build_token_services(
        backend.invitations,
        TokenPurpose.INVITATION,
        settings.invitation_ttl_seconds,
        settings,
        backend.accounts,
    )
    return InvitationService(
        issuer,
        verifier,
        redeemer,
        backend.accounts,
        notifier,
        renderer,
        min_password_length=settings.min_password_length,
        app_name=settings.email_app_name,
    )
