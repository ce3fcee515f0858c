"""In-memory backend: token stores and account directory living for the process lifetime."""

from dataclasses import dataclass, field

from app.application.services.account_events import AccountEventChannel
from app.domain.enums import TokenPurpose
from app.infrastructure.memory.account_directory import InMemoryAccountDirectory
from app.infrastructure.memory.token_store import InMemoryTokenStore


@dataclass
class MemoryBackend:
    """All process-local state for DATABASE_BACKEND=memory, created once per app."""

    events: AccountEventChannel = field(default_factory=AccountEventChannel)
    reset_tokens: InMemoryTokenStore = field(
        default_factory=lambda: InMemoryTokenStore(TokenPurpose.PASSWORD_RESET)
    )
    invitations: InMemoryTokenStore = field(
        default_factory=lambda: InMemoryTokenStore(TokenPurpose.INVITATION)
    )
    accounts: InMemoryAccountDirectory = field(init=False)

    def __post_init__(self) -> None:
        self.accounts = InMemoryAccountDirectory(self.events)


__all__ = [
    "InMemoryAccountDirectory",
    "InMemoryTokenStore",
    "MemoryBackend",
]
