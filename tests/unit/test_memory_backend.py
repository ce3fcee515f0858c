"""In-memory token store and account directory."""

import asyncio
from datetime import timedelta

import pytest

from app.application.dtos.account import AccountCreate
from app.application.services.account_events import (
    ACCOUNT_CREATED,
    ACCOUNT_PASSWORD_CHANGED,
)
from app.domain.entities.token import TokenEntity
from app.domain.enums import TokenPurpose
from app.domain.exceptions import AccountAlreadyExistsException, AccountNotFoundException
from app.domain.value_objects.core import TokenHash
from app.infrastructure.memory import InMemoryTokenStore, MemoryBackend


def _invitation(clock, raw: str = "raw-token", email: str = "bob@example.com") -> TokenEntity:
    return TokenEntity(
        id=f"id-{raw}",
        purpose=TokenPurpose.INVITATION,
        token_hash=TokenHash.of(raw).value,
        issued_at=clock.now,
        expires_at=clock.now + timedelta(days=7),
        email=email,
    )


@pytest.fixture
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore(TokenPurpose.INVITATION)


class TestInMemoryTokenStore:
    async def test_get_by_raw_token(self, store, clock) -> None:
        await store.add(_invitation(clock))
        assert (await store.get("raw-token")).id == "id-raw-token"
        assert await store.get("other") is None
        assert await store.get("") is None

    async def test_duplicate_hash_rejected(self, store, clock) -> None:
        await store.add(_invitation(clock))
        with pytest.raises(ValueError):
            await store.add(_invitation(clock))

    async def test_claim_requires_transaction(self, store, clock) -> None:
        await store.add(_invitation(clock))
        with pytest.raises(RuntimeError):
            await store.claim("raw-token", clock.now)

    async def test_claim_applied_on_clean_exit(self, store, clock) -> None:
        await store.add(_invitation(clock))
        async with store.transaction():
            claimed = await store.claim("raw-token", clock.now)
            assert claimed is not None and claimed.used_at == clock.now
            assert (await store.get("raw-token")).used_at is None
        assert (await store.get("raw-token")).used_at == clock.now

    async def test_claim_discarded_on_exception(self, store, clock) -> None:
        await store.add(_invitation(clock))
        with pytest.raises(RuntimeError):
            async with store.transaction():
                assert await store.claim("raw-token", clock.now) is not None
                raise RuntimeError("effect failed")
        assert (await store.get("raw-token")).used_at is None

        async with store.transaction():
            assert await store.claim("raw-token", clock.now) is not None

    async def test_claim_refuses_used_expired_and_missing(self, store, clock) -> None:
        await store.add(_invitation(clock))
        async with store.transaction():
            await store.claim("raw-token", clock.now)
        async with store.transaction():
            assert await store.claim("raw-token", clock.now) is None
            assert await store.claim("missing", clock.now) is None

        await store.add(_invitation(clock, raw="late"))
        async with store.transaction():
            assert await store.claim("late", clock.now + timedelta(days=7)) is None

    async def test_add_inside_transaction_is_buffered(self, store, clock) -> None:
        with pytest.raises(RuntimeError):
            async with store.transaction():
                await store.add(_invitation(clock))
                raise RuntimeError("abort")
        assert len(store) == 0

    async def test_has_pending_for_email(self, store, clock) -> None:
        assert not await store.has_pending_for_email("bob@example.com", clock.now)
        await store.add(_invitation(clock))
        assert await store.has_pending_for_email("bob@example.com", clock.now)
        assert not await store.has_pending_for_email("bob@example.com", clock.now + timedelta(days=8))
        async with store.transaction():
            await store.claim("raw-token", clock.now)
        assert not await store.has_pending_for_email("bob@example.com", clock.now)

    async def test_locks_released_after_units_of_work(self, store, clock) -> None:
        await store.add(_invitation(clock))
        await store.add(_invitation(clock, raw="other", email="eve@example.com"))
        holder_has_lock = asyncio.Event()
        release_holder = asyncio.Event()

        async def holder() -> None:
            async with store.transaction():
                await store.claim("raw-token", clock.now)
                holder_has_lock.set()
                await release_holder.wait()

        async def waiter() -> TokenEntity | None:
            async with store.transaction():
                return await store.claim("raw-token", clock.now)

        holding = asyncio.create_task(holder())
        await holder_has_lock.wait()
        waiting = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        assert store.lock_count == 1
        release_holder.set()
        await holding
        assert await waiting is None

        with pytest.raises(RuntimeError):
            async with store.transaction():
                await store.claim("other", clock.now)
                raise RuntimeError("abort")
        assert store.lock_count == 0


class TestInMemoryAccountDirectory:
    async def test_create_and_lookup_normalized(self) -> None:
        backend = MemoryBackend()
        account = await backend.accounts.seed("Carol@Example.com", "password1", "Carol")
        assert account.email == "carol@example.com"
        assert account.role == "employee"
        assert account.status == "active"
        assert (await backend.accounts.get_by_email("CAROL@example.com")).id == account.id
        assert await backend.accounts.get_by_email("not-an-email") is None
        assert await backend.accounts.check_password("carol@example.com", "password1")

    async def test_duplicate_email_rejected(self) -> None:
        backend = MemoryBackend()
        await backend.accounts.seed("carol@example.com", "password1", "Carol")
        with pytest.raises(AccountAlreadyExistsException):
            await backend.accounts.create_account(
                AccountCreate(
                    email="CAROL@example.com",
                    password="password2",
                    name="Carol 2",
                    role="employee",
                    department="",
                )
            )

    async def test_update_password_unknown_account(self) -> None:
        backend = MemoryBackend()
        with pytest.raises(AccountNotFoundException):
            await backend.accounts.update_password("missing", "password1")

    async def test_changes_published_to_subscribers(self) -> None:
        backend = MemoryBackend()
        events: list[tuple[str, str]] = []
        unsubscribe = backend.accounts.subscribe(lambda event, acc: events.append((event, acc.email)))

        account = await backend.accounts.seed("dave@example.com", "password1", "Dave")
        await backend.accounts.update_password(account.id, "password2")
        assert events == [
            (ACCOUNT_CREATED, "dave@example.com"),
            (ACCOUNT_PASSWORD_CHANGED, "dave@example.com"),
        ]

        unsubscribe()
        unsubscribe()
        await backend.accounts.seed("erin@example.com", "password1", "Erin")
        assert len(events) == 2
