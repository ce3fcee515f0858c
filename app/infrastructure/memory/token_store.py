"""Process-local token store with the same unit-of-work semantics as the SQL store.

Used by the 'memory' database backend (development, tests). Mutations made
inside transaction() are buffered and applied only when the block exits
cleanly; claim() holds a per-token asyncio.Lock until then, which makes the
check-and-set on used_at atomic across concurrent redemptions.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime

from app.domain.entities.token import TokenEntity
from app.domain.enums import TokenPurpose
from app.domain.value_objects.core import TokenHash


class _UnitOfWork:
    """Buffered writes and held locks of one transaction() block."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], None]] = []
        self.locks: dict[str, asyncio.Lock] = {}


class InMemoryTokenStore:
    """ITokenStore for one purpose, keyed by token hash."""

    def __init__(self, purpose: TokenPurpose) -> None:
        self.purpose = purpose
        self._records: dict[str, TokenEntity] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Units of work holding or waiting for each lock; the lock is dropped at zero.
        self._lock_users: dict[str, int] = {}
        self._unit: ContextVar[_UnitOfWork | None] = ContextVar(
            f"token_store_{purpose.value}_{id(self)}", default=None
        )

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[TokenEntity]:
        return list(self._records.values())

    async def add(self, record: TokenEntity) -> None:
        if record.token_hash in self._records:
            raise ValueError("Duplicate token hash")
        unit = self._unit.get()
        if unit is None:
            self._records[record.token_hash] = record
        else:
            unit.pending.append(lambda: self._records.__setitem__(record.token_hash, record))

    async def get(self, token: str) -> TokenEntity | None:
        if not token:
            return None
        return self._records.get(TokenHash.of(token).value)

    async def has_pending_for_email(self, email: str, now: datetime) -> bool:
        return any(
            r.email == email and not r.is_used() and not r.is_expired(now)
            for r in self._records.values()
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Apply buffered writes on clean exit; discard them on any exception. Joins an outer block."""
        if self._unit.get() is not None:
            yield
            return
        unit = _UnitOfWork()
        reset_token = self._unit.set(unit)
        try:
            yield
            for apply in unit.pending:
                apply()
        finally:
            self._unit.reset(reset_token)
            for token_hash, lock in reversed(unit.locks.items()):
                lock.release()
                self._release_user(token_hash)

    async def claim(self, token: str, used_at: datetime) -> TokenEntity | None:
        """Compare-and-set used_at. Must run inside transaction()."""
        unit = self._unit.get()
        if unit is None:
            raise RuntimeError("claim() must be called inside transaction()")
        token_hash = TokenHash.of(token).value
        if token_hash not in unit.locks:
            lock = self._locks.setdefault(token_hash, asyncio.Lock())
            self._lock_users[token_hash] = self._lock_users.get(token_hash, 0) + 1
            try:
                await lock.acquire()
            except BaseException:
                self._release_user(token_hash)
                raise
            unit.locks[token_hash] = lock

        record = self._records.get(token_hash)
        if record is None or record.is_used() or record.is_expired(used_at):
            return None
        claimed = record.mark_used(used_at)
        unit.pending.append(lambda: self._records.__setitem__(token_hash, claimed))
        return claimed

    def _release_user(self, token_hash: str) -> None:
        remaining = self._lock_users.get(token_hash, 0) - 1
        if remaining > 0:
            self._lock_users[token_hash] = remaining
        else:
            self._lock_users.pop(token_hash, None)
            self._locks.pop(token_hash, None)

    @property
    def lock_count(self) -> int:
        """Number of per-token locks currently held or awaited."""
        return len(self._locks)
