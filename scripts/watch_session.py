"""Sign in against the identity provider and keep the session alive with SessionGuard.

Usage:
    uv run python -m scripts.watch_session <email> <password>
Runs until the session expires (refresh failed), ends (no session left) or Ctrl+C.
Pressing Enter simulates a focus event and forces an immediate check.
All imports use app.*.
"""

import asyncio
import sys

import httpx

from app.core.config import get_settings
from app.domain.exceptions import SessionRefreshException
from app.infrastructure.external.identity import (
    create_identity_provider,
    create_session_guard,
)
from app.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> None:
    """Sign in, start the guard, wait for expiry."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.watch_session <email> <password>",
            file=sys.stderr,
        )
        sys.exit(1)
    email, password = sys.argv[1], sys.argv[2]

    setup_logging()
    settings = get_settings()
    expired = asyncio.Event()

    def on_expired(notice: str) -> None:
        print(notice)
        expired.set()

    async with httpx.AsyncClient() as http_client:
        provider = create_identity_provider(settings, http_client=http_client)
        try:
            session = await provider.sign_in_with_password(email, password)
        except SessionRefreshException as exc:
            print(f"Sign-in failed: {exc.details.get('reason')}", file=sys.stderr)
            sys.exit(1)
        print(f"Signed in; session expires at {session.expires_at.isoformat()}")

        async with create_session_guard(settings, provider, on_expired) as guard:
            loop = asyncio.get_running_loop()

            async def focus_on_enter() -> None:
                while not expired.is_set():
                    line = await loop.run_in_executor(None, sys.stdin.readline)
                    if not line:
                        return
                    state = await guard.on_focus()
                    print(f"Session state: {state.value}")

            focus_task = asyncio.create_task(focus_on_enter())
            try:
                # The guard stops itself on expiry and when the session is gone.
                while guard.running and not expired.is_set():
                    await asyncio.sleep(1)
            finally:
                focus_task.cancel()
            if not expired.is_set():
                print(f"Session ended ({guard.state.value})")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted")
