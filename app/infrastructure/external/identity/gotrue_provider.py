"""GoTrue-compatible identity provider client (client-held session).

Holds the current session in memory like a browser SDK would and talks to
the provider's REST API with httpx:

- POST /auth/v1/token?grant_type=password       (sign in)
- POST /auth/v1/token?grant_type=refresh_token  (refresh)
- POST /auth/v1/logout                          (sign out)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import httpx

from app.application.dtos.session import SessionSnapshot
from app.domain.exceptions import SessionRefreshException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import from_timestamp_utc, utc_now

logger = get_logger(__name__)


class GoTrueIdentityProvider:
    """IIdentityProvider over a GoTrue REST API.

    A refresh response only replaces the held session when it does not move
    expires_at backwards, so two racing refresh responses leave the later
    expiry in place.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        session: SessionSnapshot | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._session = session
        self._http = http_client
        self._timeout = timeout
        self._clock = clock

    @property
    def session(self) -> SessionSnapshot | None:
        return self._session

    async def get_session(self) -> SessionSnapshot | None:
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> SessionSnapshot:
        data = await self._post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            operation="sign_in",
        )
        self._session = self._parse_session(data)
        return self._session

    async def refresh_session(self) -> SessionSnapshot:
        """Exchange the refresh token. Raises SessionRefreshException on any failure."""
        current = self._session
        if current is None:
            raise SessionRefreshException("no session to refresh")
        data = await self._post(
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": current.refresh_token},
            operation="refresh",
        )
        refreshed = self._parse_session(data)
        held = self._session
        if held is None or refreshed.expires_at >= held.expires_at:
            self._session = refreshed
        return self._session or refreshed

    async def sign_out(self) -> None:
        """Drop the local session first, then revoke it at the provider (best effort)."""
        current, self._session = self._session, None
        if current is None:
            return
        try:
            await self._post(
                "/auth/v1/logout",
                access_token=current.access_token,
                operation="sign_out",
                expect_body=False,
            )
        except SessionRefreshException as exc:
            logger.warning("Provider sign-out failed: %s", exc.details.get("reason"))

    def _headers(self, access_token: str | None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._api_key:
            headers["apikey"] = self._api_key
        bearer = access_token or self._api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    async def _post(
        self,
        path: str,
        *,
        operation: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        access_token: str | None = None,
        expect_body: bool = True,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = self._headers(access_token)
        try:
            if self._http is not None:
                response = await self._http.post(
                    url, params=params, json=json, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise SessionRefreshException(f"{operation}: {type(exc).__name__}") from exc
        if response.is_error:
            raise SessionRefreshException(f"{operation}: HTTP {response.status_code}")
        if not expect_body:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise SessionRefreshException(f"{operation}: invalid JSON") from exc
        if not isinstance(data, dict):
            raise SessionRefreshException(f"{operation}: unexpected response")
        return data

    def _parse_session(self, data: dict[str, Any]) -> SessionSnapshot:
        access_token = data.get("access_token")
        refresh_token = data.get("refresh_token")
        if not access_token or not refresh_token:
            raise SessionRefreshException("response missing tokens")
        if data.get("expires_at") is not None:
            expires_at = from_timestamp_utc(float(data["expires_at"]))
        elif data.get("expires_in") is not None:
            expires_at = self._clock() + timedelta(seconds=float(data["expires_in"]))
        else:
            raise SessionRefreshException("response missing expiry")
        user = data.get("user") or {}
        return SessionSnapshot(
            access_token=str(access_token),
            refresh_token=str(refresh_token),
            expires_at=expires_at,
            user_id=user.get("id") if isinstance(user, dict) else None,
        )
