"""Injected account change channel (replaces a process-wide store with listeners)."""

from collections.abc import Callable

from app.application.dtos.account import AccountResult
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

AccountListener = Callable[[str, AccountResult], None]

ACCOUNT_CREATED = "account.created"
ACCOUNT_PASSWORD_CHANGED = "account.password_changed"


class AccountEventChannel:
    """Fan-out of account events to subscribed listeners.

    One channel is shared by the account directory adapters of a process;
    listeners are plain callables and must not block.
    """

    def __init__(self) -> None:
        self._listeners: list[AccountListener] = []

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        """Register listener; return a callable that removes it (idempotent)."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: str, account: AccountResult) -> None:
        """Notify every listener. A failing listener is logged and does not stop the others."""
        for listener in list(self._listeners):
            try:
                listener(event, account)
            except Exception:
                logger.exception("Account listener failed for %s", event)

    def __len__(self) -> int:
        return len(self._listeners)


def log_account_event(event: str, account: AccountResult) -> None:
    """Default listener: record account changes in the application log."""
    logger.info("%s id=%s role=%s", event, account.id, account.role)
