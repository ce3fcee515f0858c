"""Build a session guard wired to the configured identity provider."""

import httpx

from app.application.services.session_guard import ExpiredCallback, SessionGuard
from app.core.config import Settings
from app.infrastructure.external.identity.gotrue_provider import GoTrueIdentityProvider


def create_identity_provider(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> GoTrueIdentityProvider:
    api_key = settings.identity_provider_api_key
    return GoTrueIdentityProvider(
        settings.identity_provider_url,
        api_key.get_secret_value() if api_key else None,
        http_client=http_client,
    )


def create_session_guard(
    settings: Settings,
    provider: GoTrueIdentityProvider,
    on_expired: ExpiredCallback,
) -> SessionGuard:
    """SessionGuard with intervals from settings (check, refresh threshold, throttle)."""
    return SessionGuard(
        provider,
        on_expired,
        check_interval=settings.session_check_interval_seconds,
        refresh_threshold=settings.session_refresh_threshold_seconds,
        min_check_interval=settings.session_min_check_interval_seconds,
    )
