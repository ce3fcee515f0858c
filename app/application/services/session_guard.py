"""Client session guard: keep an identity-provider session fresh or force sign-out.

Triggers (periodic timer, focus, hidden->visible) all funnel into check().
Overlapping triggers share one in-flight check, so a burst of triggers
results in at most one provider round trip and at most one refresh.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from contextlib import suppress
from datetime import datetime, timedelta

from app.application.dtos.session import SessionSnapshot
from app.application.interfaces.services import IIdentityProvider
from app.domain.enums import SessionState
from app.domain.exceptions import SessionRefreshException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

SESSION_EXPIRED_NOTICE = "Your session has expired. Please sign in again."

ExpiredCallback = Callable[[str], Awaitable[None] | None]


class SessionGuard:
    """Per-session state machine: FRESH, NEAR_EXPIRY, EXPIRED, INVALIDATED.

    on_expired(notice) is called exactly once, after the provider session has
    been signed out. From then on the guard is inert: the timer is cancelled
    and every trigger returns EXPIRED without calling the provider.

    When the provider reports no session (INVALIDATED) the timer is cancelled
    too, without a notice; explicit triggers still check.
    """

    def __init__(
        self,
        provider: IIdentityProvider,
        on_expired: ExpiredCallback,
        *,
        check_interval: float = 300.0,
        refresh_threshold: float = 600.0,
        min_check_interval: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.provider = provider
        self.on_expired = on_expired
        self.check_interval = check_interval
        self.refresh_threshold = timedelta(seconds=refresh_threshold)
        self.min_check_interval = timedelta(seconds=min_check_interval)
        self._clock = clock

        self.state = SessionState.FRESH
        self.known_expiry: datetime | None = None
        self._last_check_at: datetime | None = None
        self._in_flight: asyncio.Future[SessionState] | None = None
        self._timer: asyncio.Task[None] | None = None
        self._visible = True
        self._signed_out = False

    # lifecycle

    def start(self) -> None:
        """Start the periodic timer. Must be called from a running event loop."""
        if self._signed_out or (self._timer is not None and not self._timer.done()):
            return
        self._timer = asyncio.create_task(self._run_timer(), name="session-guard-timer")

    async def stop(self) -> None:
        """Cancel the timer and detach triggers. Safe to call more than once."""
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            if timer is not asyncio.current_task():
                with suppress(asyncio.CancelledError):
                    await timer

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def __aenter__(self) -> SessionGuard:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # triggers

    async def on_focus(self) -> SessionState:
        return await self.check()

    async def on_visibility_change(self, visible: bool) -> SessionState | None:
        """Check only on a hidden -> visible transition; returns None otherwise."""
        was_hidden = not self._visible
        self._visible = visible
        if visible and was_hidden:
            return await self.check()
        return None

    async def check(self, *, force: bool = False) -> SessionState:
        """Run (or join) a session check and return the resulting state.

        Checks closer together than min_check_interval return the current
        state without calling the provider unless force is set.
        """
        if self._signed_out:
            return SessionState.EXPIRED
        if self._in_flight is not None and not self._in_flight.done():
            return await asyncio.shield(self._in_flight)

        now = self._clock()
        if (
            not force
            and self._last_check_at is not None
            and now - self._last_check_at < self.min_check_interval
        ):
            return self.state
        self._last_check_at = now

        in_flight = asyncio.ensure_future(self._check())
        self._in_flight = in_flight
        try:
            return await asyncio.shield(in_flight)
        finally:
            if in_flight.done() and self._in_flight is in_flight:
                self._in_flight = None

    # internals

    async def _run_timer(self) -> None:
        while not self._signed_out:
            await asyncio.sleep(self.check_interval)
            try:
                await self.check()
            except Exception:
                logger.exception("Periodic session check failed")

    async def _check(self) -> SessionState:
        try:
            session = await self.provider.get_session()
        except SessionRefreshException as exc:
            logger.warning("Could not read session: %s", exc.details.get("reason"))
            return self.state
        if session is None:
            # Nothing left to keep alive; the periodic timer ends with the session.
            self.state = SessionState.INVALIDATED
            self.known_expiry = None
            await self.stop()
            return self.state

        self._advance_expiry(session)
        remaining = (self.known_expiry or session.expires_at) - self._clock()
        if remaining >= self.refresh_threshold:
            self.state = SessionState.FRESH
            return self.state

        self.state = SessionState.NEAR_EXPIRY
        logger.info("Session expiring in %ss, refreshing", int(remaining.total_seconds()))
        try:
            refreshed = await self.provider.refresh_session()
        except SessionRefreshException as exc:
            logger.warning("Session refresh failed: %s", exc.details.get("reason"))
            await self._expire()
            return self.state

        self._advance_expiry(refreshed)
        self.state = SessionState.FRESH
        logger.info("Session refreshed; expires at %s", self.known_expiry)
        return self.state

    def _advance_expiry(self, session: SessionSnapshot) -> None:
        """Record session expiry; a late response never moves it backwards."""
        expires_at = ensure_utc(session.expires_at)
        if self.known_expiry is None or (expires_at and expires_at > self.known_expiry):
            self.known_expiry = expires_at

    async def _expire(self) -> None:
        if self._signed_out:
            return
        self._signed_out = True
        self.state = SessionState.EXPIRED
        self.known_expiry = None
        try:
            await self.provider.sign_out()
        except SessionRefreshException as exc:
            logger.warning("Sign-out at provider failed: %s", exc.details.get("reason"))
        await self.stop()
        result = self.on_expired(SESSION_EXPIRED_NOTICE)
        if inspect.isawaitable(result):
            await result
